"""Resolve an input identifier (local path or http(s) URL) into document bytes.

Local files get their media type from the file extension; remote files from
the response Content-Type header. The two paths never consult each other.
"""

import logging
from pathlib import Path

import httpx

from config import settings
from models import DocumentResource

logger = logging.getLogger(__name__)

DEFAULT_MEDIA_TYPE = "image/jpeg"

EXTENSION_MEDIA_TYPES: dict[str, str] = {
    ".pdf": "application/pdf",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
}


class ResourceError(Exception):
    """Identifier is neither a readable local file nor a fetchable URL."""


def media_type_for_path(path: Path) -> str:
    return EXTENSION_MEDIA_TYPES.get(path.suffix.lower(), DEFAULT_MEDIA_TYPE)


def media_type_from_header(content_type: str | None) -> str:
    """Strip parameters (``; charset=...``) from a Content-Type header value."""
    if not content_type:
        return DEFAULT_MEDIA_TYPE
    return content_type.split(";", 1)[0].strip()


async def fetch_resource(
    identifier: str,
    client: httpx.AsyncClient | None = None,
) -> DocumentResource:
    """Load ``identifier`` from disk if it is an existing file, else GET it.

    ``client`` is used as-is and left open; without one, a client is created
    for this call and closed before returning.
    Raises ResourceError.
    """
    path = Path(identifier)
    if path.is_file():
        return _read_local(path)

    try:
        url = httpx.URL(identifier)
    except httpx.InvalidURL as e:
        raise ResourceError(f"Not a file or URL: {identifier}") from e

    if url.scheme not in ("http", "https") or not url.host:
        raise ResourceError(f"No such file and not an http(s) URL: {identifier}")

    if client is not None:
        return await _fetch_remote(url, client)

    async with httpx.AsyncClient(
        follow_redirects=True,
        timeout=httpx.Timeout(settings.FETCH_TIMEOUT_SECONDS),
    ) as own_client:
        return await _fetch_remote(url, own_client)


def _read_local(path: Path) -> DocumentResource:
    try:
        data = path.read_bytes()
    except OSError as e:
        logger.warning("Could not read %s: %s", path, e)
        raise ResourceError(f"Cannot read file {path}: {e}") from e

    media_type = media_type_for_path(path)
    logger.info("Loaded local file: %d bytes, %s", len(data), media_type)
    return DocumentResource(data=data, media_type=media_type)


async def _fetch_remote(url: httpx.URL, client: httpx.AsyncClient) -> DocumentResource:
    try:
        resp = await client.get(url)
    except httpx.HTTPError as e:
        logger.warning("Fetching %s failed: %s", url, e)
        raise ResourceError(f"Cannot fetch {url}: {e}") from e

    if not resp.is_success:
        logger.warning("Fetching %s returned HTTP %d", url, resp.status_code)
        raise ResourceError(f"Cannot fetch {url}: HTTP {resp.status_code}")

    media_type = media_type_from_header(resp.headers.get("content-type"))
    logger.info("Fetched remote file: %d bytes, %s", len(resp.content), media_type)
    return DocumentResource(data=resp.content, media_type=media_type)
