"""Reconstruction of tool execution results sent back by a peer.

A ``tool-messages`` data part carries entries shaped like LangChain
ToolMessages. Their ``content`` is either free text or a JSON document made
of ``functionResponse`` records, e.g.::

    [{"functionResponse": {"name": "calc", "response": {"output": "42"}}}]

The readable text is pulled out of the records for the model, while the
parsed document is kept as the ToolMessage artifact.
"""

import json
from dataclasses import dataclass, field
from typing import Any

from langchain_core.messages import ToolMessage

from llm_proxy_agent.converters.parts import is_record


@dataclass(frozen=True)
class ParsedToolContent:
    """Readable outputs and preserved artifact of a tool result payload."""

    outputs: list[str] = field(default_factory=list)
    artifact: Any = None


def extract_tool_response_text(response: Any) -> str | None:
    """Extract readable text from a ``functionResponse.response`` value.

    Strings pass through; objects contribute their ``output`` or ``error``
    string; anything else is dumped as JSON.
    """
    if response is None:
        return None

    if isinstance(response, str):
        return response

    if is_record(response):
        if isinstance(response.get("output"), str):
            return response["output"]
        if isinstance(response.get("error"), str):
            return response["error"]

    try:
        return json.dumps(response)
    except (TypeError, ValueError):
        return str(response)


def parse_tool_message_content(raw_content: Any) -> ParsedToolContent:
    """Split a tool result payload into readable outputs and an artifact."""
    if not isinstance(raw_content, str):
        return ParsedToolContent(artifact=raw_content)

    trimmed = raw_content.strip()
    if not trimmed:
        return ParsedToolContent()

    try:
        parsed = json.loads(trimmed)
    except ValueError:
        return ParsedToolContent(outputs=[trimmed], artifact=trimmed)

    items = parsed if isinstance(parsed, list) else [parsed]
    outputs: list[str] = []
    for item in items:
        if not is_record(item):
            continue

        function_response = item.get("functionResponse")
        if not is_record(function_response):
            continue

        text = extract_tool_response_text(function_response.get("response"))
        if text:
            outputs.append(text)

    return ParsedToolContent(outputs=outputs or [trimmed], artifact=parsed)


def resolve_tool_call_id(entry: dict[str, Any], fallback_id: str) -> str:
    """Pick ``tool_call_id``, then ``id``, then the fallback; first non-empty wins."""
    for key in ("tool_call_id", "id"):
        value = entry.get(key)
        if isinstance(value, str) and value:
            return value
    return fallback_id


def build_tool_message(entry: dict[str, Any], fallback_id: str) -> ToolMessage:
    """Build a ToolMessage from one ``toolMessages`` entry.

    Args:
        entry: Raw entry sent by the peer
        fallback_id: Identifier used when the entry names no tool call,
            normally the id of the enclosing A2A message

    Returns:
        ToolMessage with flattened text content and the structured artifact
    """
    raw_content = entry.get("content")
    parsed = parse_tool_message_content(raw_content)

    if parsed.outputs:
        text_content = "\n\n".join(parsed.outputs)
    elif isinstance(raw_content, str):
        text_content = raw_content
    else:
        text_content = json.dumps(raw_content if raw_content is not None else "", default=str)

    entry_id = entry.get("id")
    fields: dict[str, Any] = {
        "id": entry_id if isinstance(entry_id, str) else fallback_id,
        "content": text_content,
        "tool_call_id": resolve_tool_call_id(entry, fallback_id),
        "artifact": parsed.artifact if parsed.artifact is not None else entry.get("artifact"),
    }

    if isinstance(entry.get("name"), str):
        fields["name"] = entry["name"]

    if entry.get("status") in ("success", "error"):
        fields["status"] = entry["status"]

    return ToolMessage(**fields)
