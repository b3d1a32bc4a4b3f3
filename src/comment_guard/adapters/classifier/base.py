"""Base interface for comment classifiers."""

from abc import ABC, abstractmethod

from comment_guard.domain.models import ClassificationResult


class ClassifierProvider(ABC):
    """Abstract base class for comment classifiers.

    Implementations:
    - HTTPClassifierProvider: Calls the model-serving HTTP endpoint
    - StubClassifierProvider: Keyword rules, for testing

    ``classify`` is called once per comment and may run concurrently.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name identifier."""
        ...

    @abstractmethod
    async def classify(self, text: str) -> ClassificationResult:
        """Classify a comment text.

        Args:
            text: Original comment text

        Returns:
            ClassificationResult with label, confidence and model version
        """
        ...

    async def health_check(self) -> bool:
        """Check if the classifier is reachable."""
        return True

    async def close(self) -> None:
        """Release any held resources."""
        return None
