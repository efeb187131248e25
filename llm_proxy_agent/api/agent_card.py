"""Agent card advertised to A2A peers."""

from llm_proxy_agent import __version__
from llm_proxy_agent.config import ServerConfig
from llm_proxy_agent.models.a2a import AgentCapabilities, AgentCard, AgentProvider, AgentSkill


def build_agent_card(config: ServerConfig | None = None) -> AgentCard:
    """Build the agent card for the configured public URL."""
    config = config or ServerConfig.from_env()

    return AgentCard(
        name="LLM Proxy Agent",
        description=(
            "An A2A agent that forwards conversations to a LangChain chat model and returns its replies, "
            "including tool call requests for client-side tools."
        ),
        url=config.url,
        version=__version__,
        provider=AgentProvider(organization="LLM Proxy Agent", url=config.url),
        capabilities=AgentCapabilities(streaming=False, push_notifications=False, state_transition_history=True),
        default_input_modes=["text", "data"],
        default_output_modes=["text", "data", "task-status"],
        skills=[
            AgentSkill(
                id="general_chat",
                name="General Chat",
                description="Chat with the language model. Ask questions, get help, or have a conversation.",
                tags=["chat", "llm", "langchain"],
                examples=[
                    "What is the capital of France?",
                    "Explain quantum computing in simple terms",
                    "Write a haiku about programming",
                ],
                input_modes=["text"],
                output_modes=["text", "task-status"],
            ),
            AgentSkill(
                id="client_tools",
                name="Client-side Tools",
                description=(
                    "Send tool definitions in a 'tool-definitions' data part; the reply carries the model's "
                    "tool calls in a 'langchain_ai_message' data part. Return results in a 'tool-messages' part."
                ),
                tags=["tools", "function-calling"],
                input_modes=["data"],
                output_modes=["data"],
            ),
        ],
    )
