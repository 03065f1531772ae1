from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ClassifierReply:
    """Structured answer of the external classifier for one description."""

    merchant: Optional[str] = None
    category: Optional[str] = None
    confidence: Optional[float] = None


class Classifier(ABC):
    @abstractmethod
    def classify(self, description: str, category_names: list[str]) -> ClassifierReply:
        """Classify a single description.

        Raises:
            ClassifierError: On transport failure, timeout or a malformed reply
        """

    @abstractmethod
    def classify_batch(
        self, descriptions: list[str], category_names: list[str]
    ) -> dict[int, ClassifierReply]:
        """Classify up to ten descriptions in one request.

        Returns replies keyed by the 0-based position of the description in
        ``descriptions``. Positions the classifier left out are absent.

        Raises:
            ClassifierError: When the request as a whole fails
        """
