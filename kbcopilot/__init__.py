"""Knowledge-base support copilot: document ingestion and tool-augmented streaming chat."""

__version__ = "0.1.0"
