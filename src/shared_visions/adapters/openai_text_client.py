"""OpenAI-compatible chat client for text generation."""

from dataclasses import dataclass

from openai import AsyncOpenAI

from shared_visions.services.generation import TextGenerationClient


@dataclass
class OpenAITextClient(TextGenerationClient):
    """Text client backed by an OpenAI-compatible Chat Completions API."""

    client: AsyncOpenAI

    @classmethod
    def create(cls, api_key: str, base_url: str) -> "OpenAITextClient":
        """Create a text client for the given API base URL."""
        return cls(client=AsyncOpenAI(api_key=api_key, base_url=base_url))

    async def generate_text(
        self, *, model: str, system_prompt: str | None, user_prompt: str
    ) -> str | None:
        """Send a system/user prompt pair and return the answer text."""
        messages: list[dict[str, str]] = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": user_prompt})

        response = await self.client.chat.completions.create(
            model=model,
            messages=messages,
        )
        if not response.choices:
            return None
        return response.choices[0].message.content

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.client.close()
