"""Agent executor: forwards A2A conversations to a LangChain chat model."""

from typing import Any

from langchain_core.messages import AIMessageChunk, BaseMessage, ToolMessage

from llm_proxy_agent.converters.messages import (
    NO_CONTENT_PLACEHOLDER,
    a2a_messages_to_langchain,
    content_text,
    langchain_ai_message_to_a2a,
)
from llm_proxy_agent.converters.tools import convert_tools_for_langchain, extract_tools_from_message
from llm_proxy_agent.models.a2a import (
    Artifact,
    Message,
    Task,
    TaskArtifactUpdateEvent,
    TaskState,
    TaskStatus,
    TaskStatusUpdateEvent,
    TextPart,
)
from llm_proxy_agent.services.events import ExecutionEventBus, RequestContext
from llm_proxy_agent.services.history import ConversationHistoryStore, InMemoryHistoryStore
from llm_proxy_agent.services.llm import StreamingChatModel
from llm_proxy_agent.utils.ids import cuid
from llm_proxy_agent.utils.logging import get_logger

logger = get_logger(__name__)

STREAMING_ARTIFACT_NAME = "streaming_response"


def _has_content(message: BaseMessage) -> bool:
    if isinstance(message, ToolMessage):
        return True
    if getattr(message, "tool_calls", None):
        return True
    return bool(message.content)


class LLMAgentExecutor:
    """Runs one A2A request against the chat model.

    The executor publishes the task lifecycle (submitted, working, then
    completed, failed or canceled), streams text chunks as artifact updates
    and answers with an agent message that embeds the full AIMessage.
    """

    def __init__(self, chat_model: StreamingChatModel, history_store: ConversationHistoryStore | None = None):
        """Initialize the executor.

        Args:
            chat_model: Chat model to forward conversations to
            history_store: Conversation history per context (in-memory by default)
        """
        self.chat_model = chat_model
        self.history_store = history_store or InMemoryHistoryStore()
        self.cancelled_tasks: set[str] = set()

    async def cancel_task(self, task_id: str, event_bus: ExecutionEventBus) -> None:
        """Mark a task for cancellation; the running execution publishes the final state."""
        self.cancelled_tasks.add(task_id)
        logger.info(f"Task {task_id} marked for cancellation")

    async def execute(self, context: RequestContext, event_bus: ExecutionEventBus) -> None:
        """Process the user message of a request and publish the resulting events."""
        user_message = context.user_message
        task_id = context.task_id
        context_id = context.context_id

        logger.info(f"Processing message {user_message.message_id} for task {task_id} (context: {context_id})")

        if context.task is None:
            event_bus.publish(
                Task(
                    id=task_id,
                    context_id=context_id,
                    status=TaskStatus(state="submitted"),
                    history=[user_message],
                    metadata=user_message.metadata,
                )
            )

        event_bus.publish(
            self._status_update(task_id, context_id, "working", "Processing your request with the language model...")
        )

        history = self.history_store.get(context_id)
        if not any(m.message_id == user_message.message_id for m in history):
            self.history_store.append(context_id, user_message)
            history.append(user_message)

        langchain_messages = [m for m in a2a_messages_to_langchain(history) if _has_content(m)]
        if not langchain_messages:
            logger.warning(f"No usable messages found in history for task {task_id}")
            event_bus.publish(
                self._status_update(task_id, context_id, "failed", "No message found to process.", final=True)
            )
            return

        try:
            if self._check_cancelled(task_id, context_id, event_bus, "before LLM call"):
                return

            model = self._bind_tools(user_message)

            logger.info(f"Sending {len(langchain_messages)} messages to the chat model (streaming)")
            artifact_id = cuid()
            response: AIMessageChunk | None = None
            accumulated_text = ""
            chunk_count = 0

            async for chunk in model.astream(langchain_messages):
                if self._check_cancelled(task_id, context_id, event_bus, "during streaming"):
                    return

                chunk_count += 1
                response = chunk if response is None else response + chunk
                chunk_text = content_text(chunk.content)
                accumulated_text += chunk_text

                if chunk_text.strip():
                    event_bus.publish(
                        self._artifact_update(task_id, context_id, artifact_id, chunk_text, last_chunk=False)
                    )

            logger.info(f"Streaming complete: {chunk_count} chunks, {len(accumulated_text)} total chars")
            event_bus.publish(self._artifact_update(task_id, context_id, artifact_id, "", last_chunk=True))

            if self._check_cancelled(task_id, context_id, event_bus, "after streaming"):
                return

            if response is not None:
                agent_message = langchain_ai_message_to_a2a(response, cuid(), task_id, context_id)
            else:
                agent_message = Message(
                    message_id=cuid(),
                    role="agent",
                    parts=[TextPart(text=NO_CONTENT_PLACEHOLDER)],
                    task_id=task_id,
                    context_id=context_id,
                )

            logger.info(
                f"Response for task {task_id} has {len(agent_message.parts)} part(s): "
                f"{', '.join(p.kind for p in agent_message.parts)}"
            )
            logger.debug(f"Final agent message: {agent_message.model_dump_json(by_alias=True, exclude_none=True)}")

            self.history_store.append(context_id, agent_message)
            event_bus.publish(
                TaskStatusUpdateEvent(
                    task_id=task_id,
                    context_id=context_id,
                    status=TaskStatus(state="completed", message=agent_message),
                    final=True,
                )
            )
            logger.info(f"Task {task_id} completed")

        except Exception as e:
            logger.error(f"Error processing task {task_id}: {e}", exc_info=True)

            if self._check_cancelled(task_id, context_id, event_bus, "after error"):
                return

            error_text = f"Error processing request: {str(e) or 'Unknown error'}"
            event_bus.publish(self._status_update(task_id, context_id, "failed", error_text, final=True))
        finally:
            self.cancelled_tasks.discard(task_id)

    def _bind_tools(self, user_message: Message) -> Any:
        tools = extract_tools_from_message(user_message)
        if not tools:
            return self.chat_model

        logger.info(f"Binding {len(tools)} tool(s) to the chat model")
        return self.chat_model.bind_tools(convert_tools_for_langchain(tools))

    def _check_cancelled(self, task_id: str, context_id: str, event_bus: ExecutionEventBus, stage: str) -> bool:
        if task_id not in self.cancelled_tasks:
            return False

        logger.info(f"Task {task_id} cancelled {stage}")
        event_bus.publish(
            TaskStatusUpdateEvent(
                task_id=task_id,
                context_id=context_id,
                status=TaskStatus(state="canceled"),
                final=True,
            )
        )
        self.cancelled_tasks.discard(task_id)
        return True

    def _status_update(
        self, task_id: str, context_id: str, state: TaskState, text: str, final: bool = False
    ) -> TaskStatusUpdateEvent:
        return TaskStatusUpdateEvent(
            task_id=task_id,
            context_id=context_id,
            status=TaskStatus(
                state=state,
                message=Message(
                    message_id=cuid(),
                    role="agent",
                    parts=[TextPart(text=text)],
                    task_id=task_id,
                    context_id=context_id,
                ),
            ),
            final=final,
        )

    def _artifact_update(
        self, task_id: str, context_id: str, artifact_id: str, text: str, last_chunk: bool
    ) -> TaskArtifactUpdateEvent:
        return TaskArtifactUpdateEvent(
            task_id=task_id,
            context_id=context_id,
            artifact=Artifact(artifact_id=artifact_id, name=STREAMING_ARTIFACT_NAME, parts=[TextPart(text=text)]),
            append=True,
            last_chunk=last_chunk,
        )
