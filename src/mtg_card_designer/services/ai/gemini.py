"""Google Gemini (text) and Imagen (art) over the Generative Language REST API."""

from mtg_card_designer.errors import ServiceError
from mtg_card_designer.services.ai.base import ContentProvider

ART_STYLE_PREFIX = (
    "fantasy art, digital painting, intricate, elegant, highly detailed, concept art, "
    "smooth, sharp focus, illustration, in the style of mtg, "
)


class GeminiProvider(ContentProvider):
    name = "gemini"
    base_url = "https://generativelanguage.googleapis.com/v1beta"
    image_model = "imagen-3.0-generate-002"
    text_model = "gemini-1.5-flash"

    def _headers(self) -> dict[str, str]:
        return {"x-goog-api-key": self._require_key(), "Content-Type": "application/json"}

    def _generate_image(self, prompt: str) -> str:
        data = self._post(
            f"{self.base_url}/models/{self.image_model}:predict",
            {
                "instances": [{"prompt": ART_STYLE_PREFIX + prompt}],
                "parameters": {
                    "sampleCount": 1,
                    "aspectRatio": "4:3",
                    "outputMimeType": "image/jpeg",
                },
            },
            self._headers(),
        )
        try:
            encoded = data["predictions"][0]["bytesBase64Encoded"]
        except (KeyError, IndexError, TypeError) as e:
            raise ServiceError("Gemini returned no image") from e
        return f"data:image/jpeg;base64,{encoded}"

    def _complete(self, prompt: str) -> str:
        data = self._post(
            f"{self.base_url}/models/{self.text_model}:generateContent",
            {"contents": [{"parts": [{"text": prompt}]}]},
            self._headers(),
        )
        try:
            parts = data["candidates"][0]["content"]["parts"]
        except (KeyError, IndexError, TypeError) as e:
            raise ServiceError("Gemini returned an unexpected response") from e
        return "".join(part.get("text", "") for part in parts)
