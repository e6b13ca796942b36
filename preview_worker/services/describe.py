from __future__ import annotations

import logging

import anthropic

from preview_worker.errors import EnrichmentError

logger = logging.getLogger(__name__)

PROMPT = """You are describing a website for a design inspiration gallery. Given the following information about a website, write a concise 1-2 sentence description of what the site is and why it's visually interesting.

Title: {title}
Meta description: {meta_description}
URL: {url}

Respond with only the description, no preamble."""


def build_prompt(title: str, meta_description: str, url: str) -> str:
    return PROMPT.format(title=title, meta_description=meta_description, url=url)


class ClaudeDescriber:
    def __init__(self, client: anthropic.AsyncAnthropic, model: str, max_tokens: int = 150):
        self.client = client
        self.model = model
        self.max_tokens = max_tokens

    @classmethod
    def from_api_key(cls, api_key: str, model: str, max_tokens: int = 150) -> "ClaudeDescriber":
        return cls(anthropic.AsyncAnthropic(api_key=api_key), model, max_tokens)

    async def generate(self, title: str, meta_description: str, url: str) -> str:
        try:
            msg = await self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                messages=[{"role": "user", "content": build_prompt(title, meta_description, url)}],
            )
        except anthropic.APIError as exc:
            raise EnrichmentError(f"Claude error for {url}: {exc}") from exc

        text = "".join(getattr(block, "text", "") for block in msg.content).strip()
        if not text:
            raise EnrichmentError(f"Empty description for {url}")
        return text

    async def close(self) -> None:
        await self.client.close()
