"""Write-serialisation primitive for histrack stores."""

from histrack.queue.task_queue import TaskFn, TaskQueue

__all__ = ["TaskFn", "TaskQueue"]
