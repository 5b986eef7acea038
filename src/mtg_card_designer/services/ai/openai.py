"""OpenAI images and chat completions over HTTP."""

import base64

from mtg_card_designer.errors import ServiceError
from mtg_card_designer.rendering.images import to_data_uri
from mtg_card_designer.services.ai.base import ContentProvider


class OpenAIProvider(ContentProvider):
    name = "openai"
    base_url = "https://api.openai.com/v1"
    image_model = "dall-e-3"
    text_model = "gpt-4-turbo-preview"

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._require_key()}",
            "Content-Type": "application/json",
        }

    def _generate_image(self, prompt: str) -> str:
        data = self._post(
            f"{self.base_url}/images/generations",
            {
                "model": self.image_model,
                "prompt": prompt,
                "n": 1,
                "size": "1024x1024",
                "response_format": "b64_json",
            },
            self._headers(),
        )
        try:
            encoded = data["data"][0]["b64_json"]
        except (KeyError, IndexError, TypeError) as e:
            raise ServiceError("OpenAI returned no image") from e
        return to_data_uri(base64.b64decode(encoded), "image/png")

    def _complete(self, prompt: str) -> str:
        data = self._post(
            f"{self.base_url}/chat/completions",
            {
                "model": self.text_model,
                "messages": [{"role": "user", "content": prompt}],
                "response_format": {"type": "json_object"},
            },
            self._headers(),
        )
        try:
            return data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise ServiceError("OpenAI returned an unexpected response") from e
