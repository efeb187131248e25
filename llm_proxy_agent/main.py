"""Main FastAPI application."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from llm_proxy_agent import __version__
from llm_proxy_agent.api.endpoints import get_request_handler, router
from llm_proxy_agent.config import ServerConfig
from llm_proxy_agent.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)

app = FastAPI(
    title="LLM Proxy Agent",
    description=(
        "An A2A agent that forwards user messages to a LangChain chat model and returns its responses, "
        "preserving tool calls and provider metadata across the protocol boundary."
    ),
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    tags_metadata=[
        {
            "name": "A2A",
            "description": "Agent card and JSON-RPC endpoint (message/send, tasks/get, tasks/cancel).",
        },
        {
            "name": "Health",
            "description": "Service health monitoring and status checks.",
        },
    ],
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)


def main() -> None:
    """Validate the environment and serve the agent."""
    import uvicorn

    setup_logging()
    config = ServerConfig.from_env()

    # Raises ValueError when ANTHROPIC_API_KEY is missing
    get_request_handler()

    logger.info(f"Starting LLM Proxy Agent on {config.host}:{config.port}")
    logger.info(f"Agent card: {config.url.rstrip('/')}/.well-known/agent-card.json")
    uvicorn.run(app, host=config.host, port=config.port, log_level="info")


if __name__ == "__main__":
    main()
