"""Task orchestration service that streams agent progress over SSE."""

__version__ = "1.0.0"
