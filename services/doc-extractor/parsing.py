"""Turn model replies into plain text or a JSON object.

Nothing here raises on bad model output: a reply with no text block, or with
no recoverable JSON, yields ``""`` / ``{}``.
"""

import json
import logging
import re
from typing import Any

from models import ModelReply, TextReplyBlock

logger = logging.getLogger(__name__)

# Greedy: first "{" through last "}", across newlines
_JSON_SPAN = re.compile(r"\{.*\}", re.DOTALL)


def first_text_block(reply: ModelReply) -> TextReplyBlock | None:
    for block in reply.content:
        if isinstance(block, TextReplyBlock):
            return block
    return None


def extract_plain_text(reply: ModelReply) -> str:
    block = first_text_block(reply)
    return block.text if block is not None else ""


def extract_structured_json(reply: ModelReply) -> dict[str, Any]:
    """Parse the JSON object embedded in the reply's first text block.

    The object is returned as the model wrote it, keys unfiltered.
    """
    block = first_text_block(reply)
    if block is None:
        logger.warning("Model reply has no text block")
        return {}

    parsed = try_parse_json(block.text)
    return parsed if parsed is not None else {}


def try_parse_json(raw: str) -> dict[str, Any] | None:
    """Parse the span from the first ``{`` to the last ``}`` in ``raw``.

    Tolerates preamble text and markdown fences. Two separate objects in one
    reply form a single invalid span and give None.
    """
    text = raw.strip()
    match = _JSON_SPAN.search(text)
    if match is None:
        logger.warning("No JSON object in model reply: %s", text[:200])
        return None

    try:
        result = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        logger.warning("Could not parse JSON from model reply (%s): %s", e, text[:200])
        return None

    if not isinstance(result, dict):
        return None
    return result
