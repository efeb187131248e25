"""API endpoints for the A2A agent."""

from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from llm_proxy_agent import __version__
from llm_proxy_agent.api.agent_card import build_agent_card
from llm_proxy_agent.models.a2a import AgentCard
from llm_proxy_agent.models.api import (
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    HealthResponse,
    JSONRPCError,
    JSONRPCRequest,
    JSONRPCResponse,
    MessageSendParams,
    TaskIdParams,
)
from llm_proxy_agent.services.executor import LLMAgentExecutor
from llm_proxy_agent.services.llm import create_chat_model
from llm_proxy_agent.services.request_handler import A2ARequestError, A2ARequestHandler
from llm_proxy_agent.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()

_request_handler: A2ARequestHandler | None = None


def get_request_handler() -> A2ARequestHandler:
    """Get or create the request handler instance."""
    global _request_handler
    if _request_handler is None:
        _request_handler = A2ARequestHandler(LLMAgentExecutor(create_chat_model()))
    return _request_handler


def _rpc_response(request_id: str | int | None, result: Any = None, error: JSONRPCError | None = None) -> JSONResponse:
    response = JSONRPCResponse(id=request_id, result=result, error=error)
    return JSONResponse(response.model_dump(exclude_none=True) | {"id": request_id})


def _rpc_error(request_id: str | int | None, code: int, message: str) -> JSONResponse:
    return _rpc_response(request_id, error=JSONRPCError(code=code, message=message))


@router.get("/.well-known/agent-card.json", response_model=AgentCard, response_model_by_alias=True, tags=["A2A"])
async def agent_card() -> AgentCard:
    """Serve the agent card."""
    return build_agent_card()


@router.post("/", tags=["A2A"])
async def handle_jsonrpc(request: Request, handler: A2ARequestHandler = Depends(get_request_handler)) -> JSONResponse:
    """Dispatch an A2A JSON-RPC request."""
    try:
        body = await request.json()
    except ValueError:
        return _rpc_error(None, PARSE_ERROR, "Invalid JSON payload")

    try:
        rpc = JSONRPCRequest.model_validate(body)
    except ValidationError as e:
        request_id = body.get("id") if isinstance(body, dict) else None
        logger.warning(f"Invalid JSON-RPC request: {e.error_count()} error(s)")
        return _rpc_error(request_id, INVALID_REQUEST, "Invalid JSON-RPC request")

    logger.info(f"JSON-RPC {rpc.method} (id: {rpc.id})")

    try:
        if rpc.method == "message/send":
            task = await handler.on_message_send(MessageSendParams.model_validate(rpc.params))
        elif rpc.method == "tasks/get":
            task = await handler.on_get_task(TaskIdParams.model_validate(rpc.params))
        elif rpc.method == "tasks/cancel":
            task = await handler.on_cancel_task(TaskIdParams.model_validate(rpc.params))
        else:
            return _rpc_error(rpc.id, METHOD_NOT_FOUND, f"Method not found: {rpc.method}")
    except ValidationError as e:
        logger.warning(f"Invalid params for {rpc.method}: {e.error_count()} error(s)")
        return _rpc_error(rpc.id, INVALID_PARAMS, f"Invalid params for {rpc.method}")
    except A2ARequestError as e:
        logger.warning(f"{rpc.method} failed: {e.message}")
        return _rpc_error(rpc.id, e.code, e.message)

    return _rpc_response(rpc.id, result=task.to_wire())


@router.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(UTC),
        version=__version__,
    )
