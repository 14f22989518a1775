"""Language-model extraction of brand, model, device and manual type."""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Optional

from openai import OpenAI

from manualshelf.models import ExtractedMetadata
from manualshelf.utils.text import excerpt

LOGGER = logging.getLogger(__name__)

DEFAULT_LLM_MODEL = "gpt-4o"

SYSTEM_PROMPT = (
    "You are a helpful assistant that extracts structured metadata from device manuals."
)

PROMPT_TEMPLATE = """You are an expert at extracting structured metadata from home appliance manuals. Given the following manual text, extract:
- brand (e.g., Siemens, Samsung, LG)
- model (e.g., EQ700, TQ700, XR-1234)
- device (e.g., coffee maker, fridge, TV, washing machine)
- manualType (e.g., user manual, installation guide, warranty, quick start guide)

If a field is not found, return an empty string for that field.

Return ONLY a minified JSON object with these exact keys: brand, model, device, manualType. Do not include any explanation or extra text.

Example output:
{{"brand":"Siemens","model":"EQ700","device":"integral coffeemaker","manualType":"user manual"}}

Manual text:
\"\"\"
{text}
\"\"\""""


def build_prompt(text: str, *, max_chars: int = 4000) -> str:
    return PROMPT_TEMPLATE.format(text=excerpt(text, max_chars=max_chars))


def parse_reply(content: Optional[str]) -> ExtractedMetadata:
    """Validate a model reply; anything that is not a JSON object is empty."""
    if not content:
        return ExtractedMetadata()
    try:
        data: Any = json.loads(content)
    except json.JSONDecodeError:
        LOGGER.error("Failed to parse model response as JSON: %s", content)
        return ExtractedMetadata()
    if not isinstance(data, dict):
        LOGGER.error("Model response is not a JSON object: %s", content)
        return ExtractedMetadata()
    return ExtractedMetadata.from_mapping(data)


class MetadataExtractor:
    """Calls a chat-completion model to fill :class:`ExtractedMetadata`.

    :meth:`extract` never raises: request failures and unusable replies are
    logged and returned as an all-empty result.
    """

    def __init__(
        self,
        *,
        model: str = DEFAULT_LLM_MODEL,
        api_key: str | None = None,
        base_url: str | None = None,
        client: Any = None,
        temperature: float = 0.2,
        max_tokens: int = 256,
    ) -> None:
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self._client = client
        self._api_key = api_key if api_key is not None else os.environ.get("OPENAI_API_KEY")
        self._base_url = base_url if base_url is not None else os.environ.get("OPENAI_API_BASE_URL") or None

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = OpenAI(api_key=self._api_key, base_url=self._base_url)
        return self._client

    def extract(self, text: str) -> ExtractedMetadata:
        prompt = build_prompt(text)
        LOGGER.debug("Sending prompt to %s:\n%s", self.model, prompt)
        try:
            completion = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
            content = completion.choices[0].message.content
        except Exception as exc:
            LOGGER.error("Metadata extraction request failed: %s", exc)
            return ExtractedMetadata()

        LOGGER.debug("Model response: %s", content)
        return parse_reply(content)
