import json
from typing import Any, Optional

from openai import OpenAI, OpenAIError

from statementflow.domain.errors import ClassifierError
from statementflow.logger import get_logger
from statementflow.settings import (
    DEFAULT_CLASSIFIER_MAX_RETRIES,
    DEFAULT_CLASSIFIER_TIMEOUT,
    DEFAULT_OPENAI_MODEL,
    MAX_CLASSIFIER_BATCH_SIZE,
)

from .base import Classifier, ClassifierReply

logger = get_logger(__name__)

SYSTEM_PROMPT = (
    "You are a personal finance assistant that categorizes bank transactions. "
    "Identify the merchant behind each description and pick exactly one category "
    "from the list you are given. Answer with JSON only."
)


def _single_prompt(description: str, category_names: list[str]) -> str:
    return (
        f"Categories: {', '.join(category_names)}\n"
        f"Transaction: {description}\n\n"
        'Reply with {"merchant": "<merchant name>", "category": "<one of the categories>", '
        '"confidence": <number between 0 and 1>}.'
    )


def _batch_prompt(descriptions: list[str], category_names: list[str]) -> str:
    lines = "\n".join(f"{idx}. {description}" for idx, description in enumerate(descriptions, start=1))
    return (
        f"Categories: {', '.join(category_names)}\n"
        f"Transactions:\n{lines}\n\n"
        'Reply with {"results": [{"index": <line number>, "merchant": "<merchant name>", '
        '"category": "<one of the categories>", "confidence": <number between 0 and 1>}]} '
        "with one entry per transaction."
    )


def _optional_str(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _optional_confidence(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return min(max(float(value), 0.0), 1.0)


def to_reply(payload: dict[str, Any]) -> ClassifierReply:
    """Build a reply from one JSON object, ignoring ill-typed fields."""
    return ClassifierReply(
        merchant=_optional_str(payload.get("merchant")),
        category=_optional_str(payload.get("category")),
        confidence=_optional_confidence(payload.get("confidence")),
    )


class LLMClassifier(Classifier):
    """Classifier backed by an OpenAI-compatible chat completions endpoint."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = DEFAULT_OPENAI_MODEL,
        base_url: Optional[str] = None,
        timeout: float = DEFAULT_CLASSIFIER_TIMEOUT,
        max_retries: int = DEFAULT_CLASSIFIER_MAX_RETRIES,
    ):
        self.client = OpenAI(
            api_key=api_key,
            base_url=base_url or None,
            timeout=timeout,
            max_retries=max_retries,
        )
        self.model = model

    def classify(self, description: str, category_names: list[str]) -> ClassifierReply:
        payload = self._complete(_single_prompt(description, category_names))
        return to_reply(payload)

    def classify_batch(
        self, descriptions: list[str], category_names: list[str]
    ) -> dict[int, ClassifierReply]:
        if len(descriptions) > MAX_CLASSIFIER_BATCH_SIZE:
            raise ValueError(
                f"At most {MAX_CLASSIFIER_BATCH_SIZE} descriptions per batch, got {len(descriptions)}"
            )
        if not descriptions:
            return {}

        payload = self._complete(_batch_prompt(descriptions, category_names))
        results = payload.get("results")
        if not isinstance(results, list):
            raise ClassifierError("Classifier reply has no 'results' list")

        replies = {}
        for item in results:
            if not isinstance(item, dict):
                continue
            index = item.get("index")
            if isinstance(index, bool) or not isinstance(index, int):
                continue
            if 1 <= index <= len(descriptions):
                replies[index - 1] = to_reply(item)
        return replies

    def _complete(self, user_prompt: str) -> dict[str, Any]:
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=0.0,
                response_format={"type": "json_object"},
            )
        except OpenAIError as e:
            raise ClassifierError(f"Classifier request failed: {e}") from e

        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError, TypeError) as e:
            raise ClassifierError(f"Classifier reply has no message: {e}") from e

        if not content:
            raise ClassifierError("Classifier returned an empty reply")
        try:
            payload = json.loads(content)
        except (TypeError, ValueError) as e:
            raise ClassifierError(f"Classifier returned malformed JSON: {e}") from e
        if not isinstance(payload, dict):
            raise ClassifierError("Classifier reply is not a JSON object")
        return payload
