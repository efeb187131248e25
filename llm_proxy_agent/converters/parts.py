"""Helpers for reading A2A message parts.

A data part is identified by tags in its metadata rather than by the shape
of its payload. The tags understood by the converters are:

- ``type``: what the payload is (``tool-definitions``,
  ``langchain_ai_message`` or ``tool-messages``)
- ``format``: the encoding of the payload (``langchain``)
- ``count``: expected length of the payload's array, advisory only
"""

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import Any

from llm_proxy_agent.models.a2a import DataPart, Part, TextPart

LANGCHAIN_FORMAT = "langchain"
TOOL_DEFINITIONS_TYPE = "tool-definitions"
TOOL_MESSAGES_TYPE = "tool-messages"
AI_MESSAGE_TYPE = "langchain_ai_message"


def is_record(value: Any) -> bool:
    """Return True for JSON objects (dicts), False for arrays and scalars."""
    return isinstance(value, dict)


@dataclass(frozen=True)
class DataPartTags:
    """Recognised metadata tags of a single data part."""

    type: str | None = None
    format: str | None = None
    count: int | None = None
    has_metadata: bool = False

    @classmethod
    def from_part(cls, part: DataPart) -> "DataPartTags":
        """Read the tags, ignoring values of the wrong type."""
        metadata = part.metadata
        if not is_record(metadata):
            return cls()

        type_tag = metadata.get("type")
        format_tag = metadata.get("format")
        count = metadata.get("count")
        return cls(
            type=type_tag if isinstance(type_tag, str) else None,
            format=format_tag if isinstance(format_tag, str) else None,
            count=count if isinstance(count, int) and not isinstance(count, bool) else None,
            has_metadata=True,
        )

    def matches(self, type_tag: str, format_tag: str | None = None) -> bool:
        """Check the ``type`` tag and, when given, the ``format`` tag."""
        if self.type != type_tag:
            return False
        return format_tag is None or self.format == format_tag

    def count_mismatch(self, actual: int) -> bool:
        """True when a declared count disagrees with the actual array length."""
        return self.count is not None and self.count != actual


def iter_data_parts(parts: Sequence[Part]) -> Iterator[tuple[DataPart, DataPartTags]]:
    """Yield data parts in message order together with their tags."""
    for part in parts:
        if isinstance(part, DataPart):
            yield part, DataPartTags.from_part(part)


def extract_text_content(parts: Sequence[Part]) -> str:
    """Concatenate the text of all text parts, one per line."""
    return "\n".join(part.text for part in parts if isinstance(part, TextPart))
