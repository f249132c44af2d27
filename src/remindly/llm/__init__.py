from remindly.config.settings import LLM_PROVIDER, GEMINI_API_KEY, OPENAI_API_KEY
from remindly.llm.base import LLMClient
from remindly.logger import logger

__all__ = ["LLMClient", "create_llm_client"]


def create_llm_client() -> LLMClient | None:
    """Build the configured provider client, or None when extraction is not configured."""
    if LLM_PROVIDER == "gemini" and GEMINI_API_KEY:
        from remindly.llm.gemini_client import GeminiClient

        return GeminiClient()

    if LLM_PROVIDER == "openai" and OPENAI_API_KEY:
        from remindly.llm.openai_client import OpenAIClient

        return OpenAIClient()

    logger.warning(f"No usable LLM client for LLM_PROVIDER={LLM_PROVIDER}, free-text extraction is unavailable")
    return None
