"""ragindex: build and query a small RAG index over local text documents."""
