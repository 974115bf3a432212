"""Imagen predict endpoint client."""

import base64
import binascii
from dataclasses import dataclass

import httpx

from shared_visions.domain.errors import GenerationFailedError, ParsingFailedError
from shared_visions.services.generation import ImageGenerationClient

REQUEST_TIMEOUT_SECONDS = 60


@dataclass
class HttpxImagenClient(ImageGenerationClient):
    """Image generation client using httpx. One attempt per call."""

    api_key: str
    endpoint: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, api_key: str, endpoint: str) -> "HttpxImagenClient":
        """Create an Imagen client with a managed httpx session."""
        return cls(api_key=api_key, endpoint=endpoint, http_client=httpx.AsyncClient())

    async def generate_image(self, prompt: str) -> bytes:
        """Request a single square image and return its decoded bytes."""
        body = {
            "instances": [{"prompt": prompt}],
            "parameters": {
                "sampleCount": 1,
                "aspectRatio": "1:1",
                "safetyFilterLevel": "block_medium_and_above",
            },
        }
        try:
            response = await self.http_client.post(
                self.endpoint,
                params={"key": self.api_key},
                json=body,
                timeout=REQUEST_TIMEOUT_SECONDS,
            )
        except httpx.HTTPError as exc:
            raise GenerationFailedError() from exc
        if response.status_code != httpx.codes.OK:
            raise GenerationFailedError()
        return _decode_prediction(response)

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()


def _decode_prediction(response: httpx.Response) -> bytes:
    """Extract ``predictions[0].bytesBase64Encoded`` as bytes."""
    try:
        payload = response.json()
    except ValueError as exc:
        raise ParsingFailedError() from exc
    predictions = payload.get("predictions") if isinstance(payload, dict) else None
    if not isinstance(predictions, list) or not predictions:
        raise ParsingFailedError()
    first = predictions[0]
    encoded = first.get("bytesBase64Encoded") if isinstance(first, dict) else None
    if not isinstance(encoded, str):
        raise ParsingFailedError()
    try:
        return base64.b64decode(encoded, validate=True)
    except binascii.Error as exc:
        raise ParsingFailedError() from exc
