import logging
from typing import Optional

from langchain_core.messages import HumanMessage
from langchain_google_genai import ChatGoogleGenerativeAI

from config.settings import Settings, settings as default_settings
from services.exceptions import ConfigurationError, ServiceError
from services.llm.base import LLMClient

logger = logging.getLogger(__name__)


def _content_to_text(content) -> str:
    """AIMessage.content is either a string or a list of parts."""
    if isinstance(content, str):
        return content
    parts = []
    for part in content or []:
        if isinstance(part, str):
            parts.append(part)
        elif isinstance(part, dict) and part.get("type", "text") == "text":
            parts.append(part.get("text", ""))
    return "".join(parts)


class GeminiClient(LLMClient):
    """Gemini through LangChain, one attempt per call (no retries)."""

    def __init__(self, model: ChatGoogleGenerativeAI, model_name: str = ""):
        self.model = model
        self.model_name = model_name

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "GeminiClient":
        s = settings or default_settings
        if not s.GEMINI_API_KEY:
            logger.error("GEMINI_API_KEY is not configured")
            raise ConfigurationError("GEMINI_API_KEY is not set (environment or .env)")

        try:
            model = ChatGoogleGenerativeAI(
                model=s.GEMINI_MODEL,
                google_api_key=s.GEMINI_API_KEY,
                temperature=s.LLM_TEMPERATURE,
                max_output_tokens=s.LLM_MAX_TOKENS,
                timeout=s.LLM_TIMEOUT,
                max_retries=1,
            )
        except Exception as e:
            raise ConfigurationError(f"Gemini client initialisation failed: {e}") from e

        logger.info(f"Gemini client initialised: {s.GEMINI_MODEL}")
        return cls(model, model_name=s.GEMINI_MODEL)

    def generate(self, prompt: str, **kwargs) -> str:
        try:
            response = self.model.invoke([HumanMessage(content=prompt)], **kwargs)
        except Exception as e:
            raise ServiceError(f"Gemini request failed: {e}") from e

        text = _content_to_text(response.content)
        logger.debug("===== GEMINI RAW RESPONSE =====")
        logger.debug(text)
        return text
