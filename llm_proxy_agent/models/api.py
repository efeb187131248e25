"""JSON-RPC envelope and HTTP response models."""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

from llm_proxy_agent.models.a2a import A2AModel, Message

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603
TASK_NOT_FOUND = -32001
TASK_NOT_CANCELABLE = -32002


class JSONRPCRequest(BaseModel):
    """Incoming JSON-RPC 2.0 request."""

    jsonrpc: Literal["2.0"]
    id: str | int | None = None
    method: str
    params: dict[str, Any] = Field(default_factory=dict)


class JSONRPCError(BaseModel):
    """JSON-RPC error object."""

    code: int
    message: str
    data: Any | None = None


class JSONRPCResponse(BaseModel):
    """Outgoing JSON-RPC 2.0 response; exactly one of result/error is set."""

    jsonrpc: Literal["2.0"] = "2.0"
    id: str | int | None = None
    result: Any | None = None
    error: JSONRPCError | None = None


class MessageSendParams(A2AModel):
    """Parameters of ``message/send``."""

    message: Message
    metadata: dict[str, Any] | None = None


class TaskIdParams(A2AModel):
    """Parameters of ``tasks/get`` and ``tasks/cancel``."""

    id: str
    history_length: int | None = None


class HealthResponse(BaseModel):
    """Response model for health check endpoint."""

    status: str
    timestamp: datetime
    version: str
