"""Chat-completion client for the OpenRouter gateway."""

from __future__ import annotations

from dataclasses import dataclass

from openai import APIConnectionError, APIStatusError, APITimeoutError, AsyncOpenAI

from .config import Settings
from .errors import ConfigurationError, MalformedResponseError, UpstreamError
from .log import get_logger

logger = get_logger(__name__)

APP_REFERER = "https://startup-companion.app"
APP_TITLE = "StartUP Companion"


@dataclass(frozen=True)
class PromptSpec:
    """Container describing how to call the LLM for one guide."""

    system_prompt: str
    user_prompt: str
    model: str = "openai/gpt-4o-mini"
    temperature: float = 0.7
    max_tokens: int = 3500


ClientCache = tuple[str, AsyncOpenAI]


class CompletionClient:
    """Send one system + user prompt pair and return the completion text."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._client_cache: ClientCache | None = None

    def _get_client(self) -> AsyncOpenAI:
        """Return a cached client, raising when no API key is configured."""

        api_key = self._settings.openrouter_api_key
        if not api_key:
            logger.error("OPENROUTER_API_KEY not configured")
            raise ConfigurationError("API_KEY_NOT_CONFIGURED")
        if self._client_cache and self._client_cache[0] == api_key:
            return self._client_cache[1]
        client = AsyncOpenAI(
            api_key=api_key,
            base_url=self._settings.openrouter_base_url,
            timeout=self._settings.request_timeout_seconds,
            max_retries=0,
            default_headers={"HTTP-Referer": APP_REFERER, "X-Title": APP_TITLE},
        )
        self._client_cache = (api_key, client)
        return client

    async def complete(self, spec: PromptSpec) -> str:
        client = self._get_client()
        try:
            response = await client.chat.completions.create(
                model=spec.model,
                messages=[
                    {"role": "system", "content": spec.system_prompt.strip()},
                    {"role": "user", "content": spec.user_prompt.strip()},
                ],
                temperature=spec.temperature,
                max_tokens=spec.max_tokens,
            )
        except APIStatusError as exc:
            logger.error("OpenRouter API error %s: %s", exc.status_code, exc.message)
            raise UpstreamError(exc.status_code) from exc
        except APITimeoutError as exc:
            logger.error("OpenRouter API call timed out after %ss", self._settings.request_timeout_seconds)
            raise UpstreamError(None, "timeout") from exc
        except APIConnectionError as exc:
            logger.error("OpenRouter API connection failed: %s", exc)
            raise UpstreamError(None, "connection error") from exc

        choices = getattr(response, "choices", None)
        message = choices[0].message if choices else None
        content = getattr(message, "content", None) if message else None
        if not content:
            logger.error("Invalid response structure from OpenRouter API")
            raise MalformedResponseError("INVALID_API_RESPONSE")
        return content
