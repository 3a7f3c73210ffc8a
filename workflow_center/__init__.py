"""AI Workflow Center: console for workflow records and their execution relay."""

__version__ = "1.0.0"
