"""Conversion between A2A messages and LangChain messages and tools."""

from llm_proxy_agent.converters.messages import (
    NO_CONTENT_PLACEHOLDER,
    a2a_message_to_langchain,
    a2a_messages_to_langchain,
    langchain_ai_message_to_a2a,
    parse_a2a_message_for_langchain,
)
from llm_proxy_agent.converters.parts import extract_text_content
from llm_proxy_agent.converters.tool_calls import coerce_args, normalize_tool_calls
from llm_proxy_agent.converters.tools import convert_tools_for_langchain, extract_tools_from_message, validate_tools

__all__ = [
    "NO_CONTENT_PLACEHOLDER",
    "a2a_message_to_langchain",
    "a2a_messages_to_langchain",
    "coerce_args",
    "convert_tools_for_langchain",
    "extract_text_content",
    "extract_tools_from_message",
    "langchain_ai_message_to_a2a",
    "normalize_tool_calls",
    "parse_a2a_message_for_langchain",
    "validate_tools",
]
