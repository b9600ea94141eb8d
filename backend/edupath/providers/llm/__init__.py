"""LLM provider interface plus the OpenAI-compatible and mock adapters."""
