"""Client for an OpenAI-compatible chat completions API (xAI Grok by default)."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field

import requests
from dotenv import load_dotenv

from src.config import get_narrative_settings

load_dotenv()

API_KEY_ENV = "GROK_API_KEY"

SYSTEM_PROMPT = (
    "You are a witty sports commentator writing weekly updates for a fantasy NFL "
    "league. Write engaging, entertaining narratives that capture the drama and "
    "excitement of the competition. Use humor and personality while staying "
    "factual about the data."
)


class NarrativeError(RuntimeError):
    """The recap could not be generated."""


class NarrativeParseError(NarrativeError, ValueError):
    """The completion response was not usable recap text."""


@dataclass
class NarrativeDraft:
    title: str
    content: str
    highlights: list[str] = field(default_factory=list)


def parse_completion(payload: dict) -> str:
    """Pull the generated text out of a chat completions response."""
    try:
        text = payload["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as e:
        raise NarrativeParseError(f"Unexpected completion shape: {e}") from e
    if not isinstance(text, str):
        raise NarrativeParseError("Completion content is not text")
    return text


def parse_narrative_text(text: str) -> NarrativeDraft:
    """Split generated text into a title (first line) and body paragraphs.

    Bullet lines in the body ("- ..." or "* ...") become highlights.
    """
    lines = [line.strip() for line in text.splitlines() if line.strip()]
    if not lines:
        raise NarrativeParseError("Empty response from text API")

    title = re.sub(r"^#+\s*", "", lines[0]).strip("*").strip()
    body = lines[1:]
    highlights = [re.sub(r"^[-*]\s+", "", line) for line in body if re.match(r"^[-*]\s+", line)]
    paragraphs = [line for line in body if not re.match(r"^[-*]\s+", line)]

    return NarrativeDraft(
        title=title or "Weekly Update",
        content="\n\n".join(paragraphs) or "No narrative content generated.",
        highlights=highlights,
    )


class NarrativeClient:
    """Thin wrapper over the chat completions endpoint."""

    def __init__(
        self,
        api_key: str | None = None,
        endpoint: str | None = None,
        model: str | None = None,
        max_tokens: int | None = None,
        temperature: float | None = None,
        timeout: float = 60,
    ) -> None:
        settings = get_narrative_settings()
        self.api_key = api_key if api_key is not None else os.environ.get(API_KEY_ENV, "")
        self.endpoint = endpoint or settings["endpoint"]
        self.model = model or settings["model"]
        self.max_tokens = max_tokens or settings["max_tokens"]
        self.temperature = settings["temperature"] if temperature is None else temperature
        self.timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def complete(self, prompt: str) -> str:
        """Send ``prompt`` and return the raw generated text."""
        if not self.configured:
            raise NarrativeError(f"{API_KEY_ENV} is not set")
        resp = requests.post(
            self.endpoint,
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {self.api_key}",
            },
            json={
                "model": self.model,
                "messages": [
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                "max_tokens": self.max_tokens,
                "temperature": self.temperature,
            },
            timeout=self.timeout,
        )
        resp.raise_for_status()
        return parse_completion(resp.json())

    def write_recap(self, prompt: str) -> NarrativeDraft:
        return parse_narrative_text(self.complete(prompt))
