"""Port interface for structured inference providers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TypeVar

from pydantic import BaseModel

SchemaT = TypeVar("SchemaT", bound=BaseModel)


class InferenceUnavailable(Exception):
    """Raised when the provider fails, times out, or returns unusable output."""


class StructuredInferenceProvider(ABC):
    """Turns a prompt into an object that satisfies a pydantic schema.

    Implementations must bound their own latency and raise
    ``InferenceUnavailable`` for every failure mode (transport errors,
    timeouts, unparsable JSON, schema violations).
    """

    @abstractmethod
    def infer(self, prompt: str, schema: type[SchemaT]) -> SchemaT:
        """Return an instance of ``schema`` inferred from ``prompt``."""
