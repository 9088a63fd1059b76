import logging
from dataclasses import dataclass
from typing import Optional

from ..ports.ai_provider import ImageProvider, TextProvider
from ...schemas.assistant.assistant import AssistantReply

logger = logging.getLogger(__name__)

SIGNATURE = "~ Lovely 💖"

SYSTEM_PROMPT = f"""You are Lovely, a friendly and helpful AI assistant for an image upload website.
Your goal is to help users understand how to use the website's features:
- Upload images via drag and drop or file selection
- Preview images before uploading
- Track upload progress
- View the gallery of uploaded images
- Delete images they no longer want
- Download images to their device

Keep your responses concise, friendly, and helpful. Sign your responses with "{SIGNATURE}".
If you don't know the answer to a question, politely say so and offer to help with something else."""

WELCOME_TEXT = (
    "Welcome to our Image Uploader! I'm Lovely, your assistant. I can help you learn how to "
    "upload, manage, and share your images. Feel free to ask me any questions about using "
    f"this website! {SIGNATURE}"
)
WELCOME_FALLBACK_TEXT = (
    "Welcome to our Image Uploader! I'm Lovely, your assistant. I'm here to help you with any "
    f"questions you might have about using this website! {SIGNATURE}"
)
EMPTY_REPLY_TEXT = f"I'm sorry, I couldn't generate a response. {SIGNATURE}"
ERROR_REPLY_TEXT = (
    "I'm sorry, I encountered an error while processing your request. "
    f"Please try again later. {SIGNATURE}"
)

AVATAR_PROMPT = (
    "Create a friendly, cute anime-style avatar for an AI assistant named Lovely with pink hair "
    "and a soft, welcoming expression. The image should be in a soft, pastel color palette, "
    "perfect for a user interface. The character should appear approachable and helpful."
)

MAX_REPLY_TOKENS = 500


def illustration_prompt(query: str) -> str:
    return (
        f"Create a simple, friendly, and helpful illustration related to: {query}. "
        "The image should be cute, pastel-colored, and appealing. "
        "Perfect for a user interface of an image uploader website."
    )


@dataclass
class AssistantService:
    """Answers questions about the site; never raises on provider failure."""

    text_provider: Optional[TextProvider] = None
    image_provider: Optional[ImageProvider] = None

    @property
    def available(self) -> bool:
        return self.text_provider is not None

    def answer(self, query: str, include_image: bool = False) -> AssistantReply:
        if self.text_provider is None:
            logger.warning("Assistant queried without a configured text provider")
            return AssistantReply(text=ERROR_REPLY_TEXT)
        try:
            text = self.text_provider.generate_text(SYSTEM_PROMPT, query, MAX_REPLY_TOKENS)
            image_url = None
            if include_image and self.image_provider is not None:
                image_url = self.image_provider.generate_image_url(illustration_prompt(query))
        except Exception as e:
            logger.error(f"Error generating AI response: {e}", exc_info=True)
            return AssistantReply(text=ERROR_REPLY_TEXT)
        return AssistantReply(text=text or EMPTY_REPLY_TEXT, imageUrl=image_url)

    def welcome(self) -> AssistantReply:
        if self.image_provider is None:
            return AssistantReply(text=WELCOME_FALLBACK_TEXT)
        try:
            image_url = self.image_provider.generate_image_url(AVATAR_PROMPT)
        except Exception as e:
            logger.error(f"Error generating welcome message: {e}", exc_info=True)
            return AssistantReply(text=WELCOME_FALLBACK_TEXT)
        return AssistantReply(text=WELCOME_TEXT, imageUrl=image_url)
