"""Pydantic models for documents, model request payloads and model replies."""

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag


class DocumentResource(BaseModel):
    """Raw document bytes plus the media type they were resolved to."""

    data: bytes
    media_type: str


class FieldDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    description: str


# Request side: what we send to the model


class Base64Source(BaseModel):
    type: Literal["base64"] = "base64"
    media_type: str
    data: str


class DocumentBlock(BaseModel):
    type: Literal["document"] = "document"
    source: Base64Source


class ImageBlock(BaseModel):
    type: Literal["image"] = "image"
    source: Base64Source


class TextBlock(BaseModel):
    type: Literal["text"] = "text"
    text: str


RequestBlock = Annotated[
    Union[DocumentBlock, ImageBlock, TextBlock],
    Field(discriminator="type"),
]


class RequestPayload(BaseModel):
    content: list[RequestBlock]


# Reply side: what the model sends back


class TextReplyBlock(BaseModel):
    type: Literal["text"] = "text"
    text: str


class OtherReplyBlock(BaseModel):
    """Any non-text reply block (tool use, thinking, ...). Kept but never read."""

    model_config = ConfigDict(extra="allow")

    type: str


def _reply_kind(block: Any) -> str:
    kind = block.get("type") if isinstance(block, dict) else getattr(block, "type", None)
    return "text" if kind == "text" else "other"


ReplyBlock = Annotated[
    Union[
        Annotated[TextReplyBlock, Tag("text")],
        Annotated[OtherReplyBlock, Tag("other")],
    ],
    Discriminator(_reply_kind),
]


class ModelReply(BaseModel):
    content: list[ReplyBlock] = []
    stop_reason: str | None = None
    usage: dict[str, Any] | None = None
