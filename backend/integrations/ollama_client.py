"""
Ollama REST API client.
Wraps POST /api/chat with JSON-mode output and token accounting.
"""
import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from config import settings
from core.errors import ErrorCategory, GenerationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Completion:
    text: str
    prompt_tokens: int = 0
    completion_tokens: int = 0
    model: str = ""

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens


class OllamaClient:
    """Thin client for the Ollama local LLM server."""

    def __init__(
        self,
        host: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.host = (host or settings.OLLAMA_HOST).rstrip("/")
        self.model = model or settings.OLLAMA_MODEL
        self.timeout = timeout or settings.OLLAMA_TIMEOUT_SECONDS

    def is_healthy(self) -> tuple[bool, Optional[str]]:
        """Returns (True, model_name) if Ollama is reachable, (False, error) otherwise."""
        try:
            resp = httpx.get(f"{self.host}/api/version", timeout=5)
            resp.raise_for_status()
            return True, self.model
        except httpx.HTTPError as e:
            return False, str(e)

    def chat_json(self, system: str, user: str, temperature: Optional[float] = None) -> Completion:
        """
        Call Ollama /api/chat with a system instruction and one user message,
        asking for a JSON object back. No retries: failures surface immediately
        as GenerationError tagged with a category.
        """
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            "stream": False,
            "format": "json",
            "options": {
                "num_ctx": settings.OLLAMA_NUM_CTX,
                "temperature": settings.GENERATION_TEMPERATURE if temperature is None else temperature,
            },
        }
        try:
            resp = httpx.post(f"{self.host}/api/chat", json=payload, timeout=self.timeout)
            resp.raise_for_status()
            body = resp.json()
        except httpx.TimeoutException as e:
            raise GenerationError(
                f"Generation service timed out after {self.timeout}s", category=ErrorCategory.TIMEOUT,
            ) from e
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            # 404 means the model has not been pulled
            category = ErrorCategory.CONFIG if status in (401, 403, 404) else ErrorCategory.GENERIC
            raise GenerationError(
                f"Generation service returned HTTP {status}: {e.response.text[:200]}", category=category,
            ) from e
        except httpx.TransportError as e:
            raise GenerationError(
                f"Could not reach generation service at {self.host}: {e}", category=ErrorCategory.CONFIG,
            ) from e
        except ValueError as e:
            raise GenerationError(f"Generation service sent a non-JSON envelope: {e}") from e

        message = body.get("message") if isinstance(body, dict) else None
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, str):
            raise GenerationError("Generation service sent an unexpected envelope")
        text = content.strip()
        logger.debug("Ollama response length: %d chars", len(text))
        return Completion(
            text=text,
            prompt_tokens=int(body.get("prompt_eval_count") or 0),
            completion_tokens=int(body.get("eval_count") or 0),
            model=body.get("model", self.model),
        )
