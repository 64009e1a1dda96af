"""Shared test fixtures for document extractor tests."""

import json
import os
import sys
from pathlib import Path

import pytest

# Config requires a key at import time
os.environ.setdefault("ANTHROPIC_API_KEY", "test-key")

# Add parent directory to path so we can import the modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from models import ModelReply  # noqa: E402


def make_reply(*blocks: dict) -> ModelReply:
    """Build a ModelReply from raw content block dicts."""
    return ModelReply.model_validate({"content": list(blocks), "stop_reason": "end_turn"})


def text_reply(text: str) -> ModelReply:
    return make_reply({"type": "text", "text": text})


@pytest.fixture
def png_file(tmp_path: Path) -> Path:
    """Minimal PNG signature bytes; content is never inspected."""
    path = tmp_path / "invoice.png"
    path.write_bytes(b"\x89PNG\r\n\x1a\nfake-png-body")
    return path


@pytest.fixture
def pdf_file(tmp_path: Path) -> Path:
    path = tmp_path / "invoice.pdf"
    path.write_bytes(b"%PDF-1.4\nfake pdf body\n%%EOF")
    return path


@pytest.fixture
def invoice_json() -> str:
    """Model reply for an invoice with all default fields present."""
    return json.dumps({
        "invoiceNumber": "INV-001",
        "licensePlate": "AB-123-CD",
        "amountDue": "42.50",
        "dueDate": "2024-07-01",
    })


@pytest.fixture
def fenced_reply_text() -> str:
    """Model reply wrapped in prose and a markdown code fence."""
    return (
        'Here is the result:\n```json\n{"invoiceNumber":"INV-001","amountDue":"42.50"}\n```\n'
        "Let me know if you need more."
    )


@pytest.fixture
def messages_response_body() -> dict:
    """Raw Messages API success body."""
    return {
        "id": "msg_01",
        "type": "message",
        "role": "assistant",
        "model": "claude-opus-4-1-20250805",
        "content": [{"type": "text", "text": "# Invoice\n\nTotal: 42.50"}],
        "stop_reason": "end_turn",
        "usage": {"input_tokens": 1500, "output_tokens": 12},
    }
