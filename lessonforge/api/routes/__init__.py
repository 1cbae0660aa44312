from . import lessons, tasks, worker

__all__ = ["lessons", "tasks", "worker"]
