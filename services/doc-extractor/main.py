"""Command-line entry point for document text and field extraction.

Retries and deadlines live here, around each extraction call; the
extraction pipeline itself never retries or times out.
"""

import asyncio
import json
import logging
import sys
from typing import Awaitable, Callable, TypeVar

import typer
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from config import settings
from extraction import extract_structured_data, extract_text
from fetcher import ResourceError
from model_client import ModelError, ModelUnavailable
from prompts import DEFAULT_FIELDS

logger = logging.getLogger(__name__)

T = TypeVar("T")

app = typer.Typer(
    name="doc-extractor",
    help="Extract text or structured fields from images and PDFs with a vision model.",
    add_completion=False,
)


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


async def run_with_policy(
    call: Callable[[], Awaitable[T]],
    attempts: int,
    timeout: float | None,
) -> T:
    """Run ``call`` with a per-attempt deadline, retrying on ModelUnavailable."""

    @retry(
        retry=retry_if_exception_type(ModelUnavailable),
        stop=stop_after_attempt(max(1, attempts)),
        wait=wait_exponential(
            multiplier=settings.RETRY_DELAY,
            exp_base=settings.RETRY_BACKOFF,
            max=60,
        ),
        reraise=True,
        before_sleep=lambda state: logger.warning(
            "Model provider unavailable, retrying in %.1fs (attempt %d/%d)",
            state.next_action.sleep,  # type: ignore[union-attr]
            state.attempt_number,
            attempts,
        ),
    )
    async def _attempt() -> T:
        if timeout is None:
            return await call()
        return await asyncio.wait_for(call(), timeout)

    return await _attempt()


def _run(call: Callable[[], Awaitable[T]], retries: int | None, timeout: float | None) -> T:
    attempts = retries + 1 if retries is not None else settings.RETRY_ATTEMPTS
    try:
        return asyncio.run(run_with_policy(call, attempts, timeout))
    except (ResourceError, ModelError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)
    except asyncio.TimeoutError:
        typer.echo(f"Error: timed out after {timeout}s", err=True)
        raise typer.Exit(code=1)
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=2)


def _check_timeout(value: float | None) -> float | None:
    if value is not None and value <= 0:
        raise typer.BadParameter("must be greater than 0")
    return value


def _check_log_level(value: str | None) -> str | None:
    if value is None:
        return None
    level = value.upper()
    if not isinstance(logging.getLevelName(level), int):
        raise typer.BadParameter(f"unknown logging level: {value}")
    return level


RetriesOption = typer.Option(None, "--retries", "-r", min=0, help="Extra attempts when the model provider is unavailable")
TimeoutOption = typer.Option(
    None, "--timeout", "-t", callback=_check_timeout, help="Deadline in seconds for each attempt"
)
LogLevelOption = typer.Option(
    None, "--log-level", callback=_check_log_level, help="Logging level (default: LOG_LEVEL setting)"
)


@app.command()
def text(
    identifier: str = typer.Argument(..., help="Local file path or http(s) URL"),
    retries: int | None = RetriesOption,
    timeout: float | None = TimeoutOption,
    log_level: str | None = LogLevelOption,
):
    """Extract all text from a document as markdown."""
    setup_logging(log_level or settings.LOG_LEVEL)
    result = _run(lambda: extract_text(identifier), retries, timeout)
    typer.echo(result)


@app.command()
def structured(
    identifier: str = typer.Argument(..., help="Local file path or http(s) URL"),
    field: list[str] = typer.Option(
        list(DEFAULT_FIELDS),
        "--field",
        "-f",
        help="Field to extract; repeat for several",
    ),
    retries: int | None = RetriesOption,
    timeout: float | None = TimeoutOption,
    log_level: str | None = LogLevelOption,
):
    """Extract named fields from a document and print them as JSON."""
    setup_logging(log_level or settings.LOG_LEVEL)
    result = _run(lambda: extract_structured_data(identifier, field), retries, timeout)
    typer.echo(json.dumps(result, indent=2, ensure_ascii=False))


if __name__ == "__main__":
    app()
