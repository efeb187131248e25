"""Conversion between A2A messages and LangChain messages.

Inbound, every A2A message becomes exactly one LangChain message. Which kind
is decided once, from the metadata tags of its data parts, in this order:

1. ``tool_result``: a ``{format: langchain, type: tool-messages}`` part with a
   non-empty ``toolMessages`` array becomes a ToolMessage. Only the first
   entry is used.
2. ``ai``: a ``{type: langchain_ai_message}`` part becomes an AIMessage with
   its tool calls, metadata and id restored.
3. ``text``: otherwise the text parts become a HumanMessage (role ``user``
   and unknown roles) or an AIMessage (role ``agent``).

Outbound, an AIMessage becomes an ``agent`` message with a text part for
display and a ``langchain_ai_message`` data part that step 2 can read back.
"""

import json
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Literal

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, ToolCall
from langchain_core.messages.ai import UsageMetadata

from llm_proxy_agent.converters.parts import (
    AI_MESSAGE_TYPE,
    LANGCHAIN_FORMAT,
    TOOL_MESSAGES_TYPE,
    extract_text_content,
    is_record,
    iter_data_parts,
)
from llm_proxy_agent.converters.tool_calls import normalize_invalid_tool_calls, normalize_tool_calls
from llm_proxy_agent.converters.tool_results import build_tool_message
from llm_proxy_agent.models.a2a import DataPart, Message, Part, TextPart
from llm_proxy_agent.utils.logging import get_logger

logger = get_logger(__name__)

NO_CONTENT_PLACEHOLDER = "[No content received from LLM]"

MessageVariant = Literal["tool_result", "ai", "text"]

_USAGE_KEYS = ("input_tokens", "output_tokens", "total_tokens")


@dataclass(frozen=True)
class Reconstruction:
    """Which LangChain message to build, and from which payload."""

    variant: MessageVariant
    payload: dict[str, Any] | None = None


def _find_tool_message_entry(message: Message) -> dict[str, Any] | None:
    for part, tags in iter_data_parts(message.parts):
        if not tags.matches(TOOL_MESSAGES_TYPE, LANGCHAIN_FORMAT):
            continue

        if not is_record(part.data):
            continue

        tool_messages = part.data.get("toolMessages")
        if not isinstance(tool_messages, list) or not tool_messages:
            continue

        if tags.count_mismatch(len(tool_messages)):
            logger.warning(
                f"Tool message count mismatch; metadata count: {tags.count}, "
                f"array length: {len(tool_messages)}, messageId: {message.message_id}"
            )

        # Only the first entry is reconstructed; the rest are dropped
        entry = tool_messages[0]
        if is_record(entry):
            return entry

    return None


def _find_ai_message_data(message: Message) -> dict[str, Any] | None:
    for part, tags in iter_data_parts(message.parts):
        if tags.matches(AI_MESSAGE_TYPE) and is_record(part.data):
            return part.data
    return None


def classify_message(message: Message) -> Reconstruction:
    """Resolve the reconstruction variant of an A2A message."""
    entry = _find_tool_message_entry(message)
    if entry is not None:
        return Reconstruction("tool_result", entry)

    data = _find_ai_message_data(message)
    if data is not None:
        return Reconstruction("ai", data)

    return Reconstruction("text")


def normalize_ai_content(raw_content: Any, fallback: str) -> str | list[Any]:
    """Normalize stored AIMessage content; strings and block lists pass through."""
    if isinstance(raw_content, str):
        return raw_content

    if isinstance(raw_content, list):
        return list(raw_content)

    if raw_content is None:
        return fallback

    return json.dumps(raw_content, default=str)


def _usage_metadata(raw: Any) -> UsageMetadata | None:
    if not is_record(raw) or not raw:
        return None

    if not all(isinstance(raw.get(key), int) for key in _USAGE_KEYS):
        logger.debug(f"Dropping usage_metadata without token counts: {raw}")
        return None

    return UsageMetadata(**raw)


def build_ai_message(data: dict[str, Any], fallback_id: str, fallback_content: str = "") -> AIMessage:
    """Rebuild an AIMessage from a ``langchain_ai_message`` payload.

    Args:
        data: Payload of the data part
        fallback_id: Id used when the payload has none
        fallback_content: Content used when the payload has none

    Returns:
        AIMessage; tool calls, invalid tool calls and usage are only set when
        present
    """
    additional_kwargs = dict(data["additional_kwargs"]) if is_record(data.get("additional_kwargs")) else {}
    response_metadata = dict(data["response_metadata"]) if is_record(data.get("response_metadata")) else {}
    message_id = data.get("id")

    fields: dict[str, Any] = {
        "id": message_id if isinstance(message_id, str) else fallback_id,
        "content": normalize_ai_content(data.get("content"), fallback_content),
        "additional_kwargs": additional_kwargs,
        "response_metadata": response_metadata,
    }

    tool_calls = normalize_tool_calls(data.get("tool_calls"), additional_kwargs)
    if tool_calls:
        fields["tool_calls"] = tool_calls

    invalid_tool_calls = normalize_invalid_tool_calls(data.get("invalid_tool_calls"))
    if invalid_tool_calls:
        fields["invalid_tool_calls"] = invalid_tool_calls

    usage_metadata = _usage_metadata(data.get("usage_metadata"))
    if usage_metadata:
        fields["usage_metadata"] = usage_metadata

    return AIMessage(**fields)


def _text_message(message: Message) -> BaseMessage:
    content = extract_text_content(message.parts)

    if message.role == "agent":
        return AIMessage(content=content, id=message.message_id)

    if message.role != "user":
        logger.debug(f"Unknown role {message.role!r} on message {message.message_id}, treating as user")

    return HumanMessage(content=content, id=message.message_id)


def a2a_message_to_langchain(message: Message) -> BaseMessage:
    """Convert an A2A message to a LangChain message.

    Args:
        message: A2A message

    Returns:
        ToolMessage, AIMessage or HumanMessage depending on the tagged data
        parts and the role
    """
    target = classify_message(message)
    logger.debug(f"Reconstructing message {message.message_id} as {target.variant}")

    if target.variant == "tool_result":
        return build_tool_message(target.payload, message.message_id)

    if target.variant == "ai":
        return build_ai_message(target.payload, message.message_id, extract_text_content(message.parts))

    return _text_message(message)


def a2a_messages_to_langchain(messages: Sequence[Message]) -> list[BaseMessage]:
    """Convert A2A messages to LangChain messages, preserving order."""
    return [a2a_message_to_langchain(message) for message in messages]


def content_text(content: Any) -> str:
    """Flatten LangChain message content to text.

    Block lists contribute their ``type: text`` blocks, one per line.
    """
    if isinstance(content, str):
        return content

    if isinstance(content, list):
        return "\n".join(
            block["text"]
            for block in content
            if is_record(block) and block.get("type") == "text" and isinstance(block.get("text"), str)
        )

    return ""


def _has_tool_calls(ai_message: AIMessage) -> bool:
    return bool(
        ai_message.tool_calls or ai_message.invalid_tool_calls or ai_message.additional_kwargs.get("tool_calls")
    )


def _is_degenerate(ai_message: AIMessage) -> bool:
    """True for an empty reply that carries nothing worth restoring."""
    return not ai_message.content and not _has_tool_calls(ai_message)


def _ai_message_payload(ai_message: AIMessage) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "content": ai_message.content,
        "id": ai_message.id,
        "tool_calls": [dict(tc) for tc in ai_message.tool_calls],
        "additional_kwargs": dict(ai_message.additional_kwargs),
        "response_metadata": dict(ai_message.response_metadata),
    }

    if ai_message.invalid_tool_calls:
        payload["invalid_tool_calls"] = [dict(tc) for tc in ai_message.invalid_tool_calls]

    if ai_message.usage_metadata:
        payload["usage_metadata"] = dict(ai_message.usage_metadata)

    return payload


def langchain_ai_message_to_a2a(
    ai_message: AIMessage,
    message_id: str,
    task_id: str | None = None,
    context_id: str | None = None,
) -> Message:
    """Convert a LangChain AIMessage to an A2A agent message.

    The text part lets any peer display the answer; the data part carries the
    complete AIMessage so that a LangChain peer can restore tool calls and
    provider metadata with ``a2a_message_to_langchain``.

    Args:
        ai_message: Message produced by the chat model
        message_id: Id of the new A2A message
        task_id: Optional task the message belongs to
        context_id: Optional conversation context

    Returns:
        A2A message with role ``agent``
    """
    if _is_degenerate(ai_message):
        parts: list[Part] = [TextPart(text=NO_CONTENT_PLACEHOLDER)]
    else:
        text = content_text(ai_message.content)
        parts = [TextPart(text=text)] if text.strip() else []
        parts.append(
            DataPart(
                data=_ai_message_payload(ai_message),
                metadata={"description": "LangChain AIMessage", "type": AI_MESSAGE_TYPE},
            )
        )

    return Message(
        message_id=message_id,
        role="agent",
        parts=parts,
        task_id=task_id,
        context_id=context_id,
    )


@dataclass
class ParsedLangChainResponse:
    """Text and tool calls of an AIMessage received from a remote agent."""

    content: str
    tool_calls: list[ToolCall]
    ai_message: AIMessage


def extract_langchain_message_from_a2a(message: Message) -> AIMessage | None:
    """Extract the AIMessage embedded in the first data part of a message.

    Unlike ``a2a_message_to_langchain`` this does not look at metadata tags;
    any payload with a ``content`` field is taken as an AIMessage.
    """
    first = next((part for part in message.parts if isinstance(part, DataPart)), None)
    if first is None or not is_record(first.data) or "content" not in first.data:
        return None

    return build_ai_message(first.data, message.message_id, extract_text_content(message.parts))


def extract_tool_calls_from_ai_message(ai_message: AIMessage) -> list[ToolCall]:
    """Return the tool calls of an AIMessage, empty if there are none."""
    return list(ai_message.tool_calls or [])


def parse_a2a_message_for_langchain(message: Message) -> ParsedLangChainResponse | None:
    """Parse a remote agent's reply into text content and requested tool calls."""
    ai_message = extract_langchain_message_from_a2a(message)
    if ai_message is None:
        return None

    return ParsedLangChainResponse(
        content=content_text(ai_message.content),
        tool_calls=extract_tool_calls_from_ai_message(ai_message),
        ai_message=ai_message,
    )
