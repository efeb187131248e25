"""Tests for the LLM agent executor."""

import pytest
from langchain_core.messages import AIMessageChunk, HumanMessage, ToolMessage
from langchain_core.messages.tool import tool_call_chunk

from llm_proxy_agent.converters.messages import NO_CONTENT_PLACEHOLDER
from llm_proxy_agent.models.a2a import (
    DataPart,
    Message,
    Task,
    TaskArtifactUpdateEvent,
    TaskStatus,
    TaskStatusUpdateEvent,
    TextPart,
)
from llm_proxy_agent.services.events import RecordingEventBus, RequestContext
from llm_proxy_agent.services.executor import STREAMING_ARTIFACT_NAME, LLMAgentExecutor
from llm_proxy_agent.services.history import InMemoryHistoryStore

WEATHER_TOOL = {
    "type": "function",
    "function": {
        "name": "get_weather",
        "description": "Get the weather",
        "parameters": {"type": "object", "properties": {"location": {"type": "string"}}, "required": ["location"]},
    },
}


class FakeChatModel:
    """Chat model double that streams canned chunks."""

    def __init__(self, chunks=None, error: Exception | None = None, on_chunk=None):
        self.chunks = chunks or []
        self.error = error
        self.on_chunk = on_chunk
        self.bound_tools = None
        self.received = None

    def bind_tools(self, tools, **kwargs):
        self.bound_tools = tools
        return self

    async def astream(self, messages, **kwargs):
        self.received = list(messages)
        if self.error:
            raise self.error
        for index, chunk in enumerate(self.chunks):
            if self.on_chunk:
                self.on_chunk(index)
            yield chunk


def user_message(text: str = "Hello", message_id: str = "user-1", parts=None) -> Message:
    return Message(message_id=message_id, role="user", parts=parts if parts is not None else [TextPart(text=text)])


def make_context(message: Message, task: Task | None = None) -> RequestContext:
    return RequestContext(user_message=message, task_id="task-1", context_id="ctx-1", task=task)


def status_events(bus: RecordingEventBus) -> list[TaskStatusUpdateEvent]:
    return [e for e in bus.events if isinstance(e, TaskStatusUpdateEvent)]


def artifact_events(bus: RecordingEventBus) -> list[TaskArtifactUpdateEvent]:
    return [e for e in bus.events if isinstance(e, TaskArtifactUpdateEvent)]


class TestExecute:
    """Tests for LLMAgentExecutor.execute."""

    @pytest.mark.asyncio
    async def test_event_sequence(self):
        """Test submitted, working, streamed chunks and completed."""
        model = FakeChatModel([AIMessageChunk(content="Hel", id="run-1"), AIMessageChunk(content="lo!", id="run-1")])
        bus = RecordingEventBus()

        await LLMAgentExecutor(model).execute(make_context(user_message()), bus)

        assert isinstance(bus.events[0], Task)
        assert bus.events[0].status.state == "submitted"
        assert [e.status.state for e in status_events(bus)] == ["working", "completed"]
        assert [e.artifact.parts[0].text for e in artifact_events(bus)] == ["Hel", "lo!", ""]
        assert [e.last_chunk for e in artifact_events(bus)] == [False, False, True]
        assert all(e.artifact.name == STREAMING_ARTIFACT_NAME for e in artifact_events(bus))
        assert bus.final

    @pytest.mark.asyncio
    async def test_final_message_embeds_ai_message(self):
        """Test that the completed status carries text and the serialized AIMessage."""
        model = FakeChatModel([AIMessageChunk(content="Hel"), AIMessageChunk(content="lo!")])
        bus = RecordingEventBus()

        await LLMAgentExecutor(model).execute(make_context(user_message()), bus)

        final = bus.task.status.message
        assert bus.task.status.state == "completed"
        assert final.role == "agent"
        assert final.task_id == "task-1"
        assert final.context_id == "ctx-1"
        assert final.parts[0].text == "Hello!"
        assert final.parts[1].metadata["type"] == "langchain_ai_message"

    @pytest.mark.asyncio
    async def test_streamed_chunks_folded_into_artifact(self):
        """Test that the recorded task accumulates streamed text."""
        model = FakeChatModel([AIMessageChunk(content="a"), AIMessageChunk(content="b")])
        bus = RecordingEventBus()

        await LLMAgentExecutor(model).execute(make_context(user_message()), bus)

        assert [p.text for p in bus.task.artifacts[0].parts] == ["a", "b"]

    @pytest.mark.asyncio
    async def test_tools_bound_and_tool_calls_returned(self):
        """Test that tool definitions are bound and streamed tool calls serialized."""
        model = FakeChatModel(
            [
                AIMessageChunk(
                    content="",
                    tool_call_chunks=[tool_call_chunk(name="get_weather", args='{"location": "Pa', id="call_1", index=0)],
                ),
                AIMessageChunk(content="", tool_call_chunks=[tool_call_chunk(args='ris"}', index=0)]),
            ]
        )
        message = user_message(
            parts=[
                TextPart(text="Weather in Paris?"),
                DataPart(data={"tools": [WEATHER_TOOL]}, metadata={"type": "tool-definitions", "count": 1}),
            ]
        )
        bus = RecordingEventBus()

        await LLMAgentExecutor(model).execute(make_context(message), bus)

        assert model.bound_tools[0]["function"]["name"] == "get_weather"
        final = bus.task.status.message
        assert [p.kind for p in final.parts] == ["data"]
        tool_calls = final.parts[0].data["tool_calls"]
        assert tool_calls[0]["name"] == "get_weather"
        assert tool_calls[0]["args"] == {"location": "Paris"}
        assert tool_calls[0]["id"] == "call_1"

    @pytest.mark.asyncio
    async def test_invalid_tools_not_bound(self):
        """Test that a tool list with a missing description binds nothing."""
        tool = {"type": "function", "function": {"name": "f", "parameters": {"type": "object", "properties": {}}}}
        message = user_message(
            parts=[TextPart(text="hi"), DataPart(data={"tools": [tool]}, metadata={"type": "tool-definitions"})]
        )
        model = FakeChatModel([AIMessageChunk(content="ok")])

        await LLMAgentExecutor(model).execute(make_context(message), RecordingEventBus())

        assert model.bound_tools is None
        assert model.received[0].content == "hi"

    @pytest.mark.asyncio
    async def test_no_chunks_uses_placeholder(self):
        """Test that an empty stream still completes with the placeholder text."""
        bus = RecordingEventBus()

        await LLMAgentExecutor(FakeChatModel([])).execute(make_context(user_message()), bus)

        assert bus.task.status.state == "completed"
        assert bus.task.status.message.parts[0].text == NO_CONTENT_PLACEHOLDER

    @pytest.mark.asyncio
    async def test_history_sent_to_model(self):
        """Test that earlier turns of the context are forwarded in order."""
        history = InMemoryHistoryStore()
        model = FakeChatModel([AIMessageChunk(content="first answer")])
        executor = LLMAgentExecutor(model, history_store=history)

        await executor.execute(make_context(user_message("one", "u1")), RecordingEventBus())
        model.chunks = [AIMessageChunk(content="second answer")]
        await executor.execute(make_context(user_message("two", "u2")), RecordingEventBus())

        assert [m.content for m in model.received] == ["one", "first answer", "two"]
        assert len(history.get("ctx-1")) == 4

    @pytest.mark.asyncio
    async def test_user_message_recorded_once(self):
        """Test that re-executing the same message does not duplicate it."""
        history = InMemoryHistoryStore()
        history.append("ctx-1", user_message())
        model = FakeChatModel([AIMessageChunk(content="ok")])

        await LLMAgentExecutor(model, history_store=history).execute(make_context(user_message()), RecordingEventBus())

        assert [type(m) for m in model.received] == [HumanMessage]

    @pytest.mark.asyncio
    async def test_tool_result_forwarded(self):
        """Test that tool results reach the model as ToolMessages."""
        message = user_message(
            parts=[
                DataPart(
                    data={"toolMessages": [{"tool_call_id": "call_1", "content": "sunny"}]},
                    metadata={"type": "tool-messages", "format": "langchain", "count": 1},
                )
            ]
        )
        model = FakeChatModel([AIMessageChunk(content="It is sunny.")])

        await LLMAgentExecutor(model).execute(make_context(message), RecordingEventBus())

        assert isinstance(model.received[0], ToolMessage)
        assert model.received[0].content == "sunny"

    @pytest.mark.asyncio
    async def test_empty_history_fails(self):
        """Test that a message without content fails the task."""
        model = FakeChatModel([AIMessageChunk(content="never")])
        bus = RecordingEventBus()

        await LLMAgentExecutor(model).execute(make_context(user_message(parts=[])), bus)

        assert bus.task.status.state == "failed"
        assert bus.task.status.message.parts[0].text == "No message found to process."
        assert model.received is None

    @pytest.mark.asyncio
    async def test_model_error_fails_task(self):
        """Test that model errors are reported in the failed status."""
        bus = RecordingEventBus()

        await LLMAgentExecutor(FakeChatModel(error=RuntimeError("rate limited"))).execute(
            make_context(user_message()), bus
        )

        assert bus.task.status.state == "failed"
        assert bus.task.status.message.parts[0].text == "Error processing request: rate limited"
        assert bus.final

    @pytest.mark.asyncio
    async def test_error_without_message(self):
        """Test the fallback text for errors without a message."""
        bus = RecordingEventBus()

        await LLMAgentExecutor(FakeChatModel(error=RuntimeError())).execute(make_context(user_message()), bus)

        assert bus.task.status.message.parts[0].text == "Error processing request: Unknown error"

    @pytest.mark.asyncio
    async def test_existing_task_not_resubmitted(self):
        """Test that no submitted task is published for an existing task."""
        task = Task(id="task-1", context_id="ctx-1", status=TaskStatus(state="input-required"))
        bus = RecordingEventBus(task=task)

        await LLMAgentExecutor(FakeChatModel([AIMessageChunk(content="ok")])).execute(
            make_context(user_message(), task=task), bus
        )

        assert not any(isinstance(e, Task) for e in bus.events)
        assert bus.task.status.state == "completed"


class TestCancel:
    """Tests for task cancellation."""

    @pytest.mark.asyncio
    async def test_cancel_before_call(self):
        """Test that a task cancelled up front never reaches the model."""
        model = FakeChatModel([AIMessageChunk(content="never")])
        executor = LLMAgentExecutor(model)
        bus = RecordingEventBus()
        await executor.cancel_task("task-1", bus)

        await executor.execute(make_context(user_message()), bus)

        assert bus.task.status.state == "canceled"
        assert model.received is None
        assert "task-1" not in executor.cancelled_tasks

    @pytest.mark.asyncio
    async def test_cancel_during_streaming(self):
        """Test that cancellation stops the stream and ends the task."""
        executor = LLMAgentExecutor(FakeChatModel())
        executor.chat_model.chunks = [AIMessageChunk(content="a"), AIMessageChunk(content="b")]
        executor.chat_model.on_chunk = lambda index: index == 1 and executor.cancelled_tasks.add("task-1")
        bus = RecordingEventBus()

        await executor.execute(make_context(user_message()), bus)

        assert [e.status.state for e in status_events(bus)] == ["working", "canceled"]
        assert [e.artifact.parts[0].text for e in artifact_events(bus)] == ["a"]
        assert bus.final
