"""JSON-RPC method handlers backed by the agent executor."""

from llm_proxy_agent.models.a2a import TERMINAL_STATES, AgentEvent, Task, TaskStatus
from llm_proxy_agent.models.api import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    TASK_NOT_CANCELABLE,
    TASK_NOT_FOUND,
    MessageSendParams,
    TaskIdParams,
)
from llm_proxy_agent.services.events import RecordingEventBus, RequestContext
from llm_proxy_agent.services.executor import LLMAgentExecutor
from llm_proxy_agent.utils.ids import cuid
from llm_proxy_agent.utils.logging import get_logger

logger = get_logger(__name__)


class A2ARequestError(Exception):
    """Error reported to the caller as a JSON-RPC error object."""

    code = INTERNAL_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidParamsError(A2ARequestError):
    code = INVALID_PARAMS


class TaskNotFoundError(A2ARequestError):
    code = TASK_NOT_FOUND

    def __init__(self, task_id: str):
        super().__init__(f"Task not found: {task_id}")


class TaskNotCancelableError(A2ARequestError):
    code = TASK_NOT_CANCELABLE

    def __init__(self, task_id: str, state: str):
        super().__init__(f"Task {task_id} is {state} and cannot be canceled")


class InMemoryTaskStore:
    """In-memory task storage."""

    def __init__(self):
        self.tasks: dict[str, Task] = {}

    def get(self, task_id: str) -> Task | None:
        """Get a copy of a stored task."""
        task = self.tasks.get(task_id)
        return task.model_copy(deep=True) if task else None

    def save(self, task: Task) -> None:
        """Store a snapshot of a task."""
        self.tasks[task.id] = task.model_copy(deep=True)


class StoringEventBus(RecordingEventBus):
    """Recording event bus that saves the task after every event."""

    def __init__(self, task_store: InMemoryTaskStore, task: Task | None = None):
        super().__init__(task=task)
        self.task_store = task_store

    def publish(self, event: AgentEvent) -> None:
        super().publish(event)
        if self.task is not None:
            self.task_store.save(self.task)


class A2ARequestHandler:
    """Implements ``message/send``, ``tasks/get`` and ``tasks/cancel``."""

    def __init__(self, executor: LLMAgentExecutor, task_store: InMemoryTaskStore | None = None):
        """Initialize the handler.

        Args:
            executor: Executor that processes incoming messages
            task_store: Task storage (in-memory by default)
        """
        self.executor = executor
        self.task_store = task_store or InMemoryTaskStore()

    async def on_message_send(self, params: MessageSendParams) -> Task:
        """Run the executor on a message and return the resulting task."""
        message = params.message
        existing: Task | None = None

        if message.task_id:
            existing = self.task_store.get(message.task_id)
            if existing is None:
                raise TaskNotFoundError(message.task_id)
            if existing.status.state in TERMINAL_STATES:
                raise InvalidParamsError(
                    f"Task {existing.id} is in terminal state {existing.status.state} and cannot accept messages"
                )

        task_id = existing.id if existing else cuid()
        context_id = existing.context_id if existing else (message.context_id or cuid())
        message = message.model_copy(update={"task_id": task_id, "context_id": context_id})

        if existing is not None:
            existing.history.append(message)

        event_bus = StoringEventBus(self.task_store, task=existing)
        context = RequestContext(user_message=message, task_id=task_id, context_id=context_id, task=existing)
        await self.executor.execute(context, event_bus)

        if event_bus.task is None:
            raise A2ARequestError(f"Executor produced no task for message {message.message_id}")

        return event_bus.task

    async def on_get_task(self, params: TaskIdParams) -> Task:
        """Return a stored task, optionally trimming its history."""
        task = self.task_store.get(params.id)
        if task is None:
            raise TaskNotFoundError(params.id)

        if params.history_length is not None:
            task.history = task.history[-params.history_length :] if params.history_length > 0 else []

        return task

    async def on_cancel_task(self, params: TaskIdParams) -> Task:
        """Request cancellation of a running task."""
        task = self.task_store.get(params.id)
        if task is None:
            raise TaskNotFoundError(params.id)

        if task.status.state in TERMINAL_STATES:
            raise TaskNotCancelableError(task.id, task.status.state)

        await self.executor.cancel_task(task.id, StoringEventBus(self.task_store, task=task))

        task.status = TaskStatus(state="canceled")
        self.task_store.save(task)
        logger.info(f"Task {task.id} canceled by request")
        return task
