from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class LLMConfig:
    api_key: str = os.getenv("GROQ_API_KEY", "")
    model: str = os.getenv("GROQ_MODEL", "llama-3.3-70b-versatile")
    timeout: float = 10.0
    # Extra attempts the Groq SDK makes after a failed call
    max_retries: int = 0
    max_tokens: int = 512
    temperature: float = 0.1
    enabled: bool = True


DEFAULT_LLM_CONFIG = LLMConfig()
