"""Tests for the recording event bus."""

from llm_proxy_agent.models.a2a import (
    Artifact,
    Task,
    TaskArtifactUpdateEvent,
    TaskStatus,
    TaskStatusUpdateEvent,
    TextPart,
)
from llm_proxy_agent.services.events import RecordingEventBus


def artifact_event(text: str, append: bool) -> TaskArtifactUpdateEvent:
    return TaskArtifactUpdateEvent(
        task_id="t1",
        context_id="ctx",
        artifact=Artifact(artifact_id="a1", name="streaming_response", parts=[TextPart(text=text)]),
        append=append,
    )


class TestRecordingEventBus:
    """Tests for RecordingEventBus."""

    def test_events_before_task_dropped(self, caplog):
        """Test that updates without a task are recorded but not applied."""
        bus = RecordingEventBus()

        bus.publish(TaskStatusUpdateEvent(task_id="t1", context_id="ctx", status=TaskStatus(state="working")))

        assert bus.task is None
        assert len(bus.events) == 1
        assert "before any task" in caplog.text

    def test_status_updates_applied(self):
        """Test that the latest status wins and final is tracked."""
        bus = RecordingEventBus()
        bus.publish(Task(id="t1", context_id="ctx", status=TaskStatus(state="submitted")))
        bus.publish(TaskStatusUpdateEvent(task_id="t1", context_id="ctx", status=TaskStatus(state="working")))

        assert bus.task.status.state == "working"
        assert not bus.final

        bus.publish(
            TaskStatusUpdateEvent(task_id="t1", context_id="ctx", status=TaskStatus(state="completed"), final=True)
        )

        assert bus.task.status.state == "completed"
        assert bus.final

    def test_artifact_append_and_replace(self):
        """Test appending to and replacing artifact parts."""
        bus = RecordingEventBus()
        bus.publish(Task(id="t1", context_id="ctx", status=TaskStatus(state="working")))

        bus.publish(artifact_event("a", append=True))
        bus.publish(artifact_event("b", append=True))
        bus.publish(artifact_event("", append=True))

        assert [p.text for p in bus.task.artifacts[0].parts] == ["a", "b"]

        bus.publish(artifact_event("c", append=False))

        assert [p.text for p in bus.task.artifacts[0].parts] == ["c"]

    def test_task_snapshot_is_copied(self):
        """Test that the published task is not mutated by later events."""
        task = Task(id="t1", context_id="ctx", status=TaskStatus(state="submitted"))
        bus = RecordingEventBus()
        bus.publish(task)

        bus.publish(TaskStatusUpdateEvent(task_id="t1", context_id="ctx", status=TaskStatus(state="working")))

        assert task.status.state == "submitted"
