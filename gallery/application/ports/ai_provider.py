from typing import Optional, Protocol


class TextProvider(Protocol):
    def generate_text(self, system_prompt: str, prompt: str, max_tokens: int) -> Optional[str]:
        ...


class ImageProvider(Protocol):
    def generate_image_url(self, prompt: str) -> Optional[str]:
        ...
