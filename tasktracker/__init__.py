"""Task tracker: tasks with a status lifecycle and a start/stop timer."""

__version__ = "0.1.0"
