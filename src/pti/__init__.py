"""Personal task tracker with subtasks, categories and a shared pomodoro timer."""

__version__ = "0.1.0"
