from typing import Optional

from statementflow.settings import Settings

from .base import Classifier, ClassifierReply
from .llm import LLMClassifier


def create_classifier(settings: Settings) -> Optional[Classifier]:
    """Build the AI classifier, or None when no API key is configured."""
    if not settings.ai_enabled:
        return None
    return LLMClassifier(
        api_key=settings.openai_api_key,
        model=settings.openai_model,
        base_url=settings.openai_base_url,
        timeout=settings.classifier_timeout,
        max_retries=settings.classifier_max_retries,
    )


__all__ = ["Classifier", "ClassifierReply", "LLMClassifier", "create_classifier"]
