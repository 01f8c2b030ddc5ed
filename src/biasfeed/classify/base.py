from dataclasses import dataclass
from typing import Protocol

from biasfeed.data import BiasTag


@dataclass(frozen=True)
class Classification:
    """What the language model produces for one article."""

    heading: str
    summary: str
    bias: BiasTag = BiasTag.NEUTRAL
    bias_explanation: str = ""


class Classifier(Protocol):
    """Interface for turning article text into a neutral heading, summary and bias tag."""

    async def classify(self, text: str) -> Classification:
        """Classify a single article.

        Args:
            text: Article content (or description/title when content is missing).

        Returns:
            Classification of the article.
        """
        ...
