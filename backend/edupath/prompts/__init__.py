"""Prompt templates for LLM calls."""
