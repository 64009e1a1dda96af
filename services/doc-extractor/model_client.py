"""Async HTTP client for the vision model's Messages API.

One request per call, no retries: transient failures surface as
ModelUnavailable so callers can decide whether to try again.
"""

import logging

import httpx
from pydantic import ValidationError

from config import settings
from models import ModelReply, RequestPayload

logger = logging.getLogger(__name__)

# Statuses the provider uses for overload, rate limiting and outages
RETRYABLE_STATUSES = frozenset({429, 500, 502, 503, 529})


class ModelError(Exception):
    """Model invocation failed (auth, malformed request, bad reply)."""


class ModelUnavailable(ModelError):
    """Model provider is temporarily unavailable (retryable: 429/5xx, connection error)."""


class ModelClient:
    """Messages API client; use as ``async with ModelClient() as client``."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str | None = None,
        api_version: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._base_url = (base_url or settings.ANTHROPIC_BASE_URL).rstrip("/")
        self._model = model or settings.MODEL_ID
        read_timeout = timeout if timeout is not None else settings.MODEL_TIMEOUT_SECONDS

        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers={
                "x-api-key": api_key or settings.ANTHROPIC_API_KEY,
                "anthropic-version": api_version or settings.ANTHROPIC_VERSION,
                "content-type": "application/json",
            },
            timeout=httpx.Timeout(read_timeout),
            transport=transport,
        )

    @property
    def model(self) -> str:
        return self._model

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "ModelClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def invoke(self, payload: RequestPayload, max_tokens: int) -> ModelReply:
        """Send one user turn built from ``payload`` and return the reply.

        Raises ModelUnavailable (retryable) or ModelError (non-retryable).
        """
        body = {
            "model": self._model,
            "max_tokens": max_tokens,
            "messages": [
                {"role": "user", "content": payload.model_dump(mode="json")["content"]},
            ],
        }

        try:
            resp = await self._client.post("/v1/messages", json=body)
        except (httpx.ConnectError, httpx.ConnectTimeout) as e:
            logger.warning("Model provider connection failed: %s", e)
            raise ModelUnavailable(f"Cannot connect to model provider: {e}") from e
        except httpx.TimeoutException as e:
            logger.warning("Model provider timeout: %s", e)
            raise ModelUnavailable(f"Model provider timeout: {e}") from e
        except httpx.HTTPError as e:
            logger.error("Model provider HTTP error: %s", e)
            raise ModelError(f"Model provider HTTP error: {e}") from e

        if resp.status_code in RETRYABLE_STATUSES:
            detail = _error_detail(resp)
            logger.warning("Model provider returned %d: %s", resp.status_code, detail)
            raise ModelUnavailable(detail)

        if resp.status_code != 200:
            detail = _error_detail(resp)
            logger.error("Model provider error %d: %s", resp.status_code, detail)
            raise ModelError(detail)

        try:
            reply = ModelReply.model_validate(resp.json())
        except (ValueError, ValidationError) as e:
            logger.error("Malformed model reply: %s", e)
            raise ModelError(f"Malformed model reply: {e}") from e

        if reply.usage:
            logger.info(
                "Model reply: %d blocks, input_tokens=%s output_tokens=%s stop_reason=%s",
                len(reply.content),
                reply.usage.get("input_tokens"),
                reply.usage.get("output_tokens"),
                reply.stop_reason,
            )
        return reply


def _error_detail(resp: httpx.Response) -> str:
    """Pull the provider's error message out of an error body, if it has one."""
    try:
        body = resp.json()
    except ValueError:
        return f"HTTP {resp.status_code}: {resp.text[:200]}"
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return f"HTTP {resp.status_code}: {error['message']}"
    return f"HTTP {resp.status_code}"
