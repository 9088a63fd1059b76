from typing import Optional

from openai import OpenAI

from ...application.ports.ai_provider import ImageProvider


class OpenAIImageProvider(ImageProvider):
    def __init__(self, api_key: str, model: str = "dall-e-3") -> None:
        self.client = OpenAI(api_key=api_key)
        self.model = model

    def generate_image_url(self, prompt: str) -> Optional[str]:
        response = self.client.images.generate(
            model=self.model,
            prompt=prompt,
            n=1,
            size="1024x1024",
            quality="standard",
        )
        if not response.data:
            return None
        return response.data[0].url
