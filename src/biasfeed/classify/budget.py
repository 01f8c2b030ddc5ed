"""Per-run call budget for the classification collaborator."""

import logging
from dataclasses import dataclass

from biasfeed.classify.base import Classification, Classifier
from biasfeed.data import BiasTag

logger = logging.getLogger(__name__)

DEFAULT_MAX_CALLS = 300
FALLBACK_SUMMARY_CHARS = 200
FALLBACK_HEADING_WORDS = 10


@dataclass
class CallBudget:
    """Remaining model calls for one ingestion run.

    Create one per run and pass it to whatever needs it.
    """

    max_calls: int = DEFAULT_MAX_CALLS
    used: int = 0

    @property
    def remaining(self) -> int:
        return max(0, self.max_calls - self.used)

    @property
    def exhausted(self) -> bool:
        return self.remaining == 0

    def try_consume(self) -> bool:
        """Take one call from the budget; False when none is left."""
        if self.exhausted:
            return False
        self.used += 1
        return True


def fallback_classification(text: str) -> Classification:
    """Classification built from the text alone, used once the budget is spent."""
    cleaned = " ".join(text.split())
    heading = " ".join(cleaned.split(" ")[:FALLBACK_HEADING_WORDS])
    return Classification(
        heading=heading,
        summary=cleaned[:FALLBACK_SUMMARY_CHARS],
        bias=BiasTag.NEUTRAL,
        bias_explanation="Not classified: model call budget exhausted.",
    )


class BudgetedClassifier:
    """Wrap a classifier so it stops calling the model once the budget runs out.

    Args:
        classifier: The classification collaborator.
        budget: Call budget for the current run.
    """

    def __init__(self, classifier: Classifier, budget: CallBudget) -> None:
        self._classifier = classifier
        self._budget = budget

    @property
    def budget(self) -> CallBudget:
        return self._budget

    async def classify(self, text: str) -> Classification:
        if not self._budget.try_consume():
            logger.info("Model call budget exhausted, using fallback classification")
            return fallback_classification(text)
        return await self._classifier.classify(text)
