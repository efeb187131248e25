"""A2A protocol data models.

Only the subset of the protocol the agent speaks is modelled: messages made of
text and data parts, tasks with their status and artifacts, the two streaming
update events and the agent card. Field names are snake_case in Python and
camelCase on the wire.
"""

from datetime import UTC, datetime
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

TaskState = Literal[
    "submitted",
    "working",
    "input-required",
    "completed",
    "canceled",
    "failed",
    "rejected",
    "auth-required",
    "unknown",
]

TERMINAL_STATES: frozenset[str] = frozenset({"completed", "canceled", "failed", "rejected"})


class A2AModel(BaseModel):
    """Base model using camelCase aliases on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    def to_wire(self) -> dict[str, Any]:
        """Dump the model the way peers expect to receive it."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class TextPart(A2AModel):
    """Plain text part."""

    kind: Literal["text"] = "text"
    text: str
    metadata: dict[str, Any] | None = None


class DataPart(A2AModel):
    """Structured part whose meaning is given by its metadata tags."""

    kind: Literal["data"] = "data"
    data: Any = None
    metadata: dict[str, Any] | None = None


Part = Annotated[TextPart | DataPart, Field(discriminator="kind")]


class Message(A2AModel):
    """One protocol-level message.

    ``role`` is ``user`` or ``agent`` for well-behaved peers, but any string is
    accepted so that converters can apply their own fallback.
    """

    kind: Literal["message"] = "message"
    message_id: str
    role: str
    parts: list[Part] = Field(default_factory=list)
    task_id: str | None = None
    context_id: str | None = None
    metadata: dict[str, Any] | None = None


class TaskStatus(A2AModel):
    """Current state of a task, optionally with the message that produced it."""

    state: TaskState
    message: Message | None = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))


class Artifact(A2AModel):
    """Output produced by a task."""

    artifact_id: str
    name: str | None = None
    parts: list[Part] = Field(default_factory=list)


class Task(A2AModel):
    """A unit of work tracked by the agent."""

    kind: Literal["task"] = "task"
    id: str
    context_id: str
    status: TaskStatus
    history: list[Message] = Field(default_factory=list)
    artifacts: list[Artifact] = Field(default_factory=list)
    metadata: dict[str, Any] | None = None


class TaskStatusUpdateEvent(A2AModel):
    """Status transition published while a task executes."""

    kind: Literal["status-update"] = "status-update"
    task_id: str
    context_id: str
    status: TaskStatus
    final: bool = False


class TaskArtifactUpdateEvent(A2AModel):
    """Artifact chunk published while a task executes."""

    kind: Literal["artifact-update"] = "artifact-update"
    task_id: str
    context_id: str
    artifact: Artifact
    append: bool | None = None
    last_chunk: bool | None = None


AgentEvent = Task | TaskStatusUpdateEvent | TaskArtifactUpdateEvent | Message


class AgentProvider(A2AModel):
    """Organisation operating the agent."""

    organization: str
    url: str


class AgentCapabilities(A2AModel):
    """Optional protocol features supported by the agent."""

    streaming: bool = False
    push_notifications: bool = False
    state_transition_history: bool = False


class AgentSkill(A2AModel):
    """A capability advertised on the agent card."""

    id: str
    name: str
    description: str
    tags: list[str] = Field(default_factory=list)
    examples: list[str] = Field(default_factory=list)
    input_modes: list[str] | None = None
    output_modes: list[str] | None = None


class AgentCard(A2AModel):
    """Self-description served at /.well-known/agent-card.json."""

    name: str
    description: str
    url: str
    version: str
    protocol_version: str = "0.3.0"
    provider: AgentProvider | None = None
    capabilities: AgentCapabilities = Field(default_factory=AgentCapabilities)
    default_input_modes: list[str] = Field(default_factory=lambda: ["text"])
    default_output_modes: list[str] = Field(default_factory=lambda: ["text"])
    skills: list[AgentSkill] = Field(default_factory=list)
    supports_authenticated_extended_card: bool = False
