"""
LLM integration layer.

Responsibilities:
- Manage Groq API configuration and credentials.
- Expose a narrow structured-inference port (prompt + pydantic schema in,
  validated object out).
- Surface every provider failure as ``InferenceUnavailable`` so callers can
  fall back without knowing about the network.
"""
