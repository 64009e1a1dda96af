"""Field descriptions and request payload builders for the vision model.

Structured prompts carry a literal JSON example and a strict JSON-only
instruction so the reply parses even without constrained decoding.
"""

import base64
from types import MappingProxyType

from models import (
    Base64Source,
    DocumentBlock,
    DocumentResource,
    FieldDescriptor,
    ImageBlock,
    RequestPayload,
    TextBlock,
)

PDF_MEDIA_TYPE = "application/pdf"

DEFAULT_FIELDS: tuple[str, ...] = ("invoiceNumber", "licensePlate", "amountDue", "dueDate")

FIELD_SCHEMA = MappingProxyType({
    d.name: d
    for d in (
        FieldDescriptor(name="invoiceNumber", description="Invoice number or ID"),
        FieldDescriptor(name="licensePlate", description="License plate number or vehicle registration"),
        FieldDescriptor(name="amountDue", description="Amount due (total amount to pay)"),
        FieldDescriptor(name="dueDate", description="Due date for payment"),
        FieldDescriptor(name="company", description="Company or organization name"),
        FieldDescriptor(name="address", description="Address"),
    )
})

TEXT_INSTRUCTION = "Please extract all text from this document and return it in markdown format."

_STRUCTURED_INSTRUCTION = """Extract the following information from this document and return ONLY a JSON object (no markdown, no extra text): {fields}.

Return as JSON like this example:
{{
  "invoiceNumber": "value",
  "licensePlate": "value",
  "amountDue": "value",
  "dueDate": "value"
}}

If a field is not found, use null."""


def describe_field(name: str) -> str:
    """Human-readable description of a field; unknown names come back unchanged."""
    descriptor = FIELD_SCHEMA.get(name)
    return descriptor.description if descriptor else name


def _field_phrase(name: str) -> str:
    description = describe_field(name)
    return name if description == name else f"{name} ({description})"


def document_block(resource: DocumentResource) -> DocumentBlock | ImageBlock:
    """PDFs go in a document block, everything else in an image block."""
    source = Base64Source(
        media_type=resource.media_type,
        data=base64.b64encode(resource.data).decode(),
    )
    if resource.media_type == PDF_MEDIA_TYPE:
        return DocumentBlock(source=source)
    return ImageBlock(source=source)


def build_text_prompt(resource: DocumentResource) -> RequestPayload:
    return RequestPayload(content=[
        document_block(resource),
        TextBlock(text=TEXT_INSTRUCTION),
    ])


def build_structured_prompt(resource: DocumentResource, fields: list[str] | tuple[str, ...]) -> RequestPayload:
    instruction = _STRUCTURED_INSTRUCTION.format(
        fields=", ".join(_field_phrase(f) for f in fields),
    )
    return RequestPayload(content=[
        document_block(resource),
        TextBlock(text=instruction),
    ])


def validate_fields(fields: list[str] | tuple[str, ...]) -> None:
    """Raise ValueError unless ``fields`` is a non-empty list of non-empty names."""
    if isinstance(fields, str) or not fields:
        raise ValueError("At least one field name is required")
    for name in fields:
        if not isinstance(name, str) or not name.strip():
            raise ValueError(f"Invalid field name: {name!r}")
