"""LiteLLM client wrapper for embedding and generation calls.

All model calls in the index and ask pipelines route through ``ModelClient``.
The service endpoint is passed in at construction; nothing reads a global base URL.

No automatic retry: ``num_retries=0`` on every call. A timeout surfaces as
``ServiceTimeout``; any other failure as ``EmbeddingUnavailable`` or
``GenerationUnavailable``. A failed embedding is never replaced by a default vector.
"""

from __future__ import annotations

import logging
import math
import os
import urllib.error
import urllib.request

import litellm

from ragindex.errors import EmbeddingUnavailable, GenerationUnavailable, ServiceTimeout

# Disable LiteLLM verbose logging unless explicitly enabled
litellm.suppress_debug_info = True

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:11434"
DEFAULT_EMBEDDING_MODEL = "ollama/nomic-embed-text"
DEFAULT_GENERATION_MODEL = "ollama/llama2"
DEFAULT_TIMEOUT = 60.0

_HEALTH_PATH = "/api/tags"


# ------------------------------------------------------------------
# Provider → env var mapping for API key validation
# ------------------------------------------------------------------

_PROVIDER_ENV: dict[str, str | None] = {
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
    "azure": "AZURE_API_KEY",
    "cohere": "COHERE_API_KEY",
    "mistral": "MISTRAL_API_KEY",
    "groq": "GROQ_API_KEY",
    "ollama": None,  # Local, no key required
    "ollama_chat": None,
}


def validate_api_key(model: str) -> None:
    """Check that the required API key env var is set for *model*.

    Args:
        model: LiteLLM model string in 'provider/model' format.

    Raises:
        EnvironmentError: If the required key is missing from environment.
    """
    provider = model.split("/")[0].lower() if "/" in model else "openai"
    env_var = _PROVIDER_ENV.get(provider)

    if env_var is None:
        return

    if not os.getenv(env_var):
        raise EnvironmentError(
            f"API key not found for provider '{provider}'. "
            f"Set the {env_var} environment variable."
        )


class ModelClient:
    """Embedding + generation adapter over LiteLLM.

    Args:
        base_url: Model service endpoint (e.g. a local Ollama server).
        timeout: Per-call timeout in seconds.
        embedding_model: Default LiteLLM embedding model string.
        generation_model: Default LiteLLM generation model string.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        embedding_model: str = DEFAULT_EMBEDDING_MODEL,
        generation_model: str = DEFAULT_GENERATION_MODEL,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.embedding_model = embedding_model
        self.generation_model = generation_model

    def embed(self, text: str, model: str | None = None) -> list[float]:
        """Return the embedding vector of *text*.

        Raises:
            ServiceTimeout: The call exceeded ``timeout``.
            EmbeddingUnavailable: Any other service failure, or an empty vector.
        """
        model = model or self.embedding_model
        try:
            response = litellm.embedding(
                model=model,
                input=[text],
                api_base=self.base_url,
                timeout=self.timeout,
                num_retries=0,
            )
        except litellm.Timeout as exc:
            raise ServiceTimeout("embedding", self.timeout) from exc
        except Exception as exc:
            raise EmbeddingUnavailable(f"Embedding call to '{model}' failed: {exc}") from exc

        try:
            vector = response.data[0]["embedding"]
        except (AttributeError, IndexError, KeyError, TypeError) as exc:
            raise EmbeddingUnavailable(
                f"Embedding response from '{model}' has no vector"
            ) from exc
        if not vector:
            raise EmbeddingUnavailable(f"Embedding response from '{model}' is empty")
        try:
            values = [float(v) for v in vector]
        except (TypeError, ValueError) as exc:
            raise EmbeddingUnavailable(
                f"Embedding response from '{model}' has a non-numeric component"
            ) from exc
        if not all(math.isfinite(v) for v in values):
            raise EmbeddingUnavailable(
                f"Embedding response from '{model}' contains NaN or infinity"
            )
        return values

    def generate(self, prompt: str, model: str | None = None) -> str:
        """Return the generated text for *prompt*.

        Raises:
            ServiceTimeout: The call exceeded ``timeout``.
            GenerationUnavailable: Any other service failure, or a response
                without a message.
        """
        model = model or self.generation_model
        try:
            response = litellm.completion(
                model=model,
                messages=[{"role": "user", "content": prompt}],
                api_base=self.base_url,
                timeout=self.timeout,
                num_retries=0,
            )
        except litellm.Timeout as exc:
            raise ServiceTimeout("generation", self.timeout) from exc
        except Exception as exc:
            raise GenerationUnavailable(f"Generation call to '{model}' failed: {exc}") from exc

        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError, KeyError, TypeError) as exc:
            raise GenerationUnavailable(
                f"Generation response from '{model}' has no message"
            ) from exc
        return content or ""

    def is_service_reachable(self) -> bool:
        """Return True if the model service answers on its health endpoint."""
        url = f"{self.base_url}{_HEALTH_PATH}"
        try:
            with urllib.request.urlopen(url, timeout=self.timeout) as resp:
                return 200 <= resp.status < 300
        except (urllib.error.URLError, OSError, ValueError) as exc:
            logger.debug("Health check against %s failed: %s", url, exc)
            return False
