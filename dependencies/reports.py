from functools import lru_cache

from config.settings import settings
from services.llm.llm_gemini import GeminiClient
from services.report_generator import ReportConfig, ReportGenerator


@lru_cache(maxsize=1)
def get_report_generator() -> ReportGenerator:
    """Shared generator; raises ConfigurationError when Gemini credentials are missing."""
    return ReportGenerator(GeminiClient.from_settings(settings), ReportConfig.from_settings(settings))
