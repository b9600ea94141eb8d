"""LLM providers behind the university search collaborator."""
