"""Chat model construction."""

from collections.abc import AsyncIterator, Sequence
from typing import Any, Protocol

from langchain_anthropic import ChatAnthropic
from langchain_core.messages import AIMessageChunk, BaseMessage

from llm_proxy_agent.config import LLMConfig
from llm_proxy_agent.utils.logging import get_logger

logger = get_logger(__name__)


class StreamingChatModel(Protocol):
    """The part of a LangChain chat model the executor relies on."""

    def bind_tools(self, tools: Sequence[dict[str, Any]], **kwargs: Any) -> Any:
        """Return a runnable that advertises the given tools to the model."""
        ...

    def astream(self, input: Sequence[BaseMessage], **kwargs: Any) -> AsyncIterator[AIMessageChunk]:
        """Stream the model's reply as message chunks."""
        ...


def create_chat_model(config: LLMConfig | None = None) -> ChatAnthropic:
    """Create the chat model the agent forwards conversations to.

    Args:
        config: Model configuration (defaults to the environment)

    Returns:
        Configured ChatAnthropic instance

    Raises:
        ValueError: If no API key is configured
    """
    config = config or LLMConfig.from_env()
    if not config.api_key:
        raise ValueError("ANTHROPIC_API_KEY environment variable is required")

    logger.info(
        f"Initializing chat model {config.model} (temperature: {config.temperature}, max_tokens: {config.max_tokens})"
    )

    return ChatAnthropic(
        model=config.model,
        temperature=config.temperature,
        max_tokens=config.max_tokens,
        anthropic_api_key=config.api_key,
    )
