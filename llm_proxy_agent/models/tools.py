"""Schema of tool definitions advertised by a peer (OpenAI function calling format)."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class FunctionParameters(BaseModel):
    """JSON-Schema object describing the function arguments."""

    model_config = ConfigDict(extra="allow")

    type: Literal["object"]
    properties: dict[str, Any]
    required: list[Any] = Field(default_factory=list)


class FunctionSchema(BaseModel):
    """Name, description and parameters of a callable function."""

    model_config = ConfigDict(extra="allow")

    name: str = Field(min_length=1)
    description: str = Field(min_length=1)
    parameters: FunctionParameters


class ToolDefinition(BaseModel):
    """One tool definition, e.g. ``{"type": "function", "function": {...}}``."""

    model_config = ConfigDict(extra="allow")

    type: Literal["function"]
    function: FunctionSchema
