from __future__ import annotations

import json
import logging

from groq import Groq
from pydantic import ValidationError

from .config import DEFAULT_LLM_CONFIG, LLMConfig
from .ports import InferenceUnavailable, SchemaT, StructuredInferenceProvider

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a structured data extraction engine. "
    "Answer the user's request and return ONLY valid JSON that conforms "
    "to this JSON schema:\n{schema}\n"
    "Do not add fields that are not in the schema."
)


class GroqStructuredInference(StructuredInferenceProvider):
    """Groq chat completion in JSON mode, validated against a pydantic schema."""

    def __init__(self, config: LLMConfig = DEFAULT_LLM_CONFIG) -> None:
        self._config = config

    def infer(self, prompt: str, schema: type[SchemaT]) -> SchemaT:
        config = self._config
        if not config.enabled or not config.api_key:
            raise InferenceUnavailable("Groq inference is disabled or has no API key")

        try:
            client = Groq(
                api_key=config.api_key,
                timeout=config.timeout,
                max_retries=config.max_retries,
            )
            response = client.chat.completions.create(
                model=config.model,
                messages=[
                    {
                        "role": "system",
                        "content": SYSTEM_PROMPT.format(
                            schema=json.dumps(schema.model_json_schema())
                        ),
                    },
                    {"role": "user", "content": prompt},
                ],
                max_tokens=config.max_tokens,
                temperature=config.temperature,
                response_format={"type": "json_object"},
            )
            content = response.choices[0].message.content or ""
            parsed = json.loads(content)
        except Exception as exc:
            raise InferenceUnavailable(f"Groq call failed: {exc}") from exc

        try:
            return schema.model_validate(parsed)
        except ValidationError as exc:
            logger.warning("Groq output did not match %s schema", schema.__name__)
            raise InferenceUnavailable(f"Groq output failed validation: {exc}") from exc
