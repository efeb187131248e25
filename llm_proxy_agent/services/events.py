"""Request context and event bus used by the agent executor."""

from dataclasses import dataclass, field
from typing import Protocol

from llm_proxy_agent.models.a2a import (
    AgentEvent,
    Artifact,
    Message,
    Task,
    TaskArtifactUpdateEvent,
    TaskStatusUpdateEvent,
    TextPart,
)
from llm_proxy_agent.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class RequestContext:
    """Everything the executor needs to know about one incoming message."""

    user_message: Message
    task_id: str
    context_id: str
    task: Task | None = None


class ExecutionEventBus(Protocol):
    """Sink for the events produced while a task executes."""

    def publish(self, event: AgentEvent) -> None:
        """Publish one event."""
        ...


@dataclass
class RecordingEventBus:
    """Event bus that keeps every event and folds them into a Task."""

    task: Task | None = None
    events: list[AgentEvent] = field(default_factory=list)

    def publish(self, event: AgentEvent) -> None:
        """Record an event and apply it to the current task."""
        self.events.append(event)

        if isinstance(event, Task):
            self.task = event.model_copy(deep=True)
        elif self.task is None:
            logger.warning(f"Dropping {event.kind} event published before any task")
        elif isinstance(event, TaskStatusUpdateEvent):
            self.task.status = event.status
        elif isinstance(event, TaskArtifactUpdateEvent):
            self._apply_artifact(event)

    @property
    def final(self) -> bool:
        """True once a final status update was published."""
        return any(isinstance(e, TaskStatusUpdateEvent) and e.final for e in self.events)

    def _apply_artifact(self, event: TaskArtifactUpdateEvent) -> None:
        # Empty text parts only mark the end of a stream
        parts = [p for p in event.artifact.parts if not (isinstance(p, TextPart) and not p.text)]
        existing = next((a for a in self.task.artifacts if a.artifact_id == event.artifact.artifact_id), None)

        if existing is None:
            self.task.artifacts.append(
                Artifact(artifact_id=event.artifact.artifact_id, name=event.artifact.name, parts=parts)
            )
        elif event.append:
            existing.parts.extend(parts)
        elif parts:
            existing.parts = parts
