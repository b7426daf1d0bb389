import logging
import openai

from app.core.config import settings

logger = logging.getLogger(__name__)


class ExtractionError(Exception):
    """The model call failed or returned nothing usable."""


class LLMService:
    def __init__(self):
        # Any OpenAI-compatible endpoint; vision support needed for PDFs/images
        self.api_key = settings.LLM_API_KEY
        self.base_url = settings.LLM_BASE_URL
        self.model = settings.LLM_MODEL
        self.max_tokens = settings.LLM_MAX_TOKENS
        self._client = None

    @property
    def client(self):
        if self._client is None:
            try:
                self._client = openai.OpenAI(
                    api_key=self.api_key,
                    base_url=self.base_url
                )
            except openai.OpenAIError as e:
                # e.g. no API key configured
                raise ExtractionError(str(e)) from e
        return self._client

    def complete(self, content) -> str:
        """
        Single user-turn completion. `content` is either a plain prompt string
        or a list of content parts (text + image/file attachments).
        No retry: a failed call fails the request.
        """
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": content}],
                max_tokens=self.max_tokens,
                temperature=0,
                stream=False
            )
        except openai.OpenAIError as e:
            logger.error(f"❌ LLM Error: {e}")
            raise ExtractionError(str(e)) from e

        text = response.choices[0].message.content if response.choices else None
        if not text:
            raise ExtractionError("Failed to extract data")
        return text.strip()


def get_llm_service():
    return LLMService()
