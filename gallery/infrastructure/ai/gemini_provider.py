from typing import Optional

import google.generativeai as genai

from ...application.ports.ai_provider import TextProvider


class GeminiProvider(TextProvider):
    def __init__(self, api_key: str, model_name: str) -> None:
        genai.configure(api_key=api_key)
        self.model_name = model_name

    def generate_text(self, system_prompt: str, prompt: str, max_tokens: int) -> Optional[str]:
        model = genai.GenerativeModel(self.model_name, system_instruction=system_prompt)
        result = model.generate_content(
            prompt,
            generation_config=genai.GenerationConfig(max_output_tokens=max_tokens),
        )
        return getattr(result, "text", None)
