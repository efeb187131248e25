"""Normalization of tool calls embedded in serialized AI messages.

Two encodings are accepted. The canonical one is LangChain's own::

    {"name": "get_weather", "args": {"location": "Paris"}, "id": "call_1"}

The legacy one is the OpenAI wire format kept in ``additional_kwargs``::

    {"id": "call_1", "function": {"name": "get_weather", "arguments": "{\\"location\\": \\"Paris\\"}"}}

Canonical calls win whenever there is at least one; legacy calls are only
used when the canonical list is missing or empty.
"""

import json
from typing import Any

from langchain_core.messages import InvalidToolCall, ToolCall
from langchain_core.messages.tool import invalid_tool_call, tool_call

from llm_proxy_agent.converters.parts import is_record
from llm_proxy_agent.utils.logging import get_logger

logger = get_logger(__name__)


def coerce_args(value: Any) -> dict[str, Any]:
    """Coerce tool call arguments into a mapping.

    JSON strings are parsed; anything that does not end up as an object,
    including unparsable strings, becomes an empty mapping.
    """
    if isinstance(value, str):
        try:
            parsed = json.loads(value)
        except ValueError:
            return {}
        return parsed if is_record(parsed) else {}

    if is_record(value):
        return value

    return {}


def _optional_str(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def parse_tool_calls_array(raw: Any) -> list[ToolCall]:
    """Parse canonical ``{name, args, id}`` entries, skipping nameless ones."""
    if not isinstance(raw, list):
        return []

    tool_calls: list[ToolCall] = []
    for item in raw:
        if not is_record(item):
            continue

        name = _optional_str(item.get("name"))
        if not name:
            continue

        tool_calls.append(tool_call(name=name, args=coerce_args(item.get("args")), id=_optional_str(item.get("id"))))

    return tool_calls


def parse_additional_tool_calls(additional_kwargs: dict[str, Any]) -> list[ToolCall]:
    """Parse legacy ``additional_kwargs.tool_calls[*].function`` entries."""
    raw = additional_kwargs.get("tool_calls")
    if not isinstance(raw, list):
        return []

    tool_calls: list[ToolCall] = []
    for item in raw:
        if not is_record(item):
            continue

        function = item.get("function")
        if not is_record(function):
            continue

        name = _optional_str(function.get("name"))
        arguments = function.get("arguments")
        if not name or not isinstance(arguments, str):
            continue

        tool_calls.append(tool_call(name=name, args=coerce_args(arguments), id=_optional_str(item.get("id"))))

    return tool_calls


def normalize_tool_calls(raw: Any, additional_kwargs: dict[str, Any]) -> list[ToolCall] | None:
    """Reconcile both encodings into canonical tool calls.

    Returns:
        The canonical calls if there are any, else the legacy calls, else None
        so that callers can leave the field out entirely.
    """
    canonical = parse_tool_calls_array(raw)
    if canonical:
        return canonical

    legacy = parse_additional_tool_calls(additional_kwargs)
    if legacy:
        logger.debug(f"Recovered {len(legacy)} tool call(s) from additional_kwargs")
        return legacy

    return None


def normalize_invalid_tool_calls(raw: Any) -> list[InvalidToolCall] | None:
    """Normalize ``invalid_tool_calls`` entries, None when there are none."""
    if not isinstance(raw, list):
        return None

    invalid_calls = [
        invalid_tool_call(
            name=_optional_str(item.get("name")),
            args=_optional_str(item.get("args")),
            id=_optional_str(item.get("id")),
            error=_optional_str(item.get("error")),
        )
        for item in raw
        if is_record(item)
    ]

    return invalid_calls or None
