"""Extraction orchestrator: fetch document, build prompt, call model, parse.

ResourceError and ModelError propagate; poor model output degrades to an
empty result.
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Sequence

import httpx

from config import settings
from fetcher import fetch_resource
from model_client import ModelClient
from parsing import extract_plain_text, extract_structured_json
from prompts import DEFAULT_FIELDS, build_structured_prompt, build_text_prompt, validate_fields

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _model_client(client: ModelClient | None) -> AsyncIterator[ModelClient]:
    """Use the caller's client, or open one for the duration of a single call."""
    if client is not None:
        yield client
        return
    async with ModelClient() as own_client:
        yield own_client


async def extract_text(
    identifier: str,
    model_client: ModelClient | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> str:
    """Extract all text from a document as markdown. ``""`` if the model gave none."""
    start = time.monotonic()

    resource = await fetch_resource(identifier, client=http_client)
    payload = build_text_prompt(resource)

    async with _model_client(model_client) as client:
        reply = await client.invoke(payload, settings.TEXT_MAX_TOKENS)

    text = extract_plain_text(reply)
    logger.info(
        "Text extraction finished in %dms: %d chars",
        int((time.monotonic() - start) * 1000), len(text),
    )
    return text


async def extract_structured_data(
    identifier: str,
    fields: Sequence[str] = DEFAULT_FIELDS,
    model_client: ModelClient | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> dict[str, Any]:
    """Extract the requested fields as a mapping.

    The mapping holds whatever keys the model returned; requested fields may
    be missing or null. ``{}`` if no JSON object could be recovered.
    """
    validate_fields(fields)
    start = time.monotonic()

    resource = await fetch_resource(identifier, client=http_client)
    payload = build_structured_prompt(resource, fields)

    async with _model_client(model_client) as client:
        reply = await client.invoke(payload, settings.STRUCTURED_MAX_TOKENS)

    data = extract_structured_json(reply)
    elapsed_ms = int((time.monotonic() - start) * 1000)

    if not data:
        logger.warning("Structured extraction found no fields (%dms)", elapsed_ms)
    else:
        missing = [f for f in fields if data.get(f) is None]
        logger.info(
            "Structured extraction finished in %dms: %d keys, missing=%s",
            elapsed_ms, len(data), missing,
        )
    return data
