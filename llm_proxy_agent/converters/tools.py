"""Extraction and validation of tool definitions sent by a peer.

Peers advertise the tools the model may call in a data part::

    {
        "kind": "data",
        "data": {"tools": [...]},
        "metadata": {"type": "tool-definitions", "format": "langchain", "count": 2},
    }

A tool list is accepted as a whole or not at all, so the model never sees a
partial tool set.
"""

from typing import Any

from pydantic import ValidationError

from llm_proxy_agent.converters.parts import TOOL_DEFINITIONS_TYPE, is_record, iter_data_parts
from llm_proxy_agent.models.a2a import Message
from llm_proxy_agent.models.tools import ToolDefinition
from llm_proxy_agent.utils.logging import get_logger

logger = get_logger(__name__)


def validate_tools(tools: Any) -> bool:
    """Validate a candidate list of tool definitions.

    Returns:
        True if the list is non-empty and every element is a valid function
        definition, False otherwise. Never raises.
    """
    if not isinstance(tools, list) or not tools:
        logger.debug("Tool list rejected: not a list or empty")
        return False

    for index, tool in enumerate(tools):
        try:
            ToolDefinition.model_validate(tool)
        except ValidationError as e:
            logger.warning(f"Tool list rejected: invalid tool at index {index}: {e.error_count()} error(s)")
            logger.debug(f"Invalid tool definition at index {index}: {e}")
            return False

    logger.debug(f"All {len(tools)} tool definitions validated")
    return True


def extract_tools_from_message(message: Message) -> list[dict[str, Any]]:
    """Find the first valid tool definition list in a message.

    A data part qualifies when it is tagged ``type: tool-definitions``, or when
    it carries no metadata at all and its payload has a ``tools`` array.

    Args:
        message: Incoming A2A message

    Returns:
        The validated tool definitions, or an empty list
    """
    for part, tags in iter_data_parts(message.parts):
        if tags.has_metadata and not tags.matches(TOOL_DEFINITIONS_TYPE):
            continue

        if not is_record(part.data) or not isinstance(part.data.get("tools"), list):
            continue

        tools = part.data["tools"]
        if tags.count_mismatch(len(tools)):
            logger.warning(
                f"Tool definition count mismatch; metadata count: {tags.count}, "
                f"array length: {len(tools)}, messageId: {message.message_id}"
            )

        if validate_tools(tools):
            logger.info(f"Extracted {len(tools)} tool(s): {', '.join(t['function']['name'] for t in tools)}")
            return tools

        logger.warning(f"Tool definitions found in message {message.message_id} but validation failed")

    logger.debug(f"No tool definitions in message {message.message_id}")
    return []


def convert_tools_for_langchain(tools: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Project validated tool definitions to the shape accepted by ``bind_tools``."""
    return [
        {
            "type": "function",
            "function": {
                "name": tool["function"]["name"],
                "description": tool["function"]["description"],
                "parameters": tool["function"]["parameters"],
            },
        }
        for tool in tools
    ]
