"""Chat Relay — streams LLM completions for a single user message over plain HTTP."""

__version__ = "1.0.0"
