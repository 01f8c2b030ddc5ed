"""Classification collaborator interface and call budget."""

from biasfeed.classify.base import Classification, Classifier
from biasfeed.classify.budget import (
    BudgetedClassifier,
    CallBudget,
    fallback_classification,
)

__all__ = [
    "BudgetedClassifier",
    "CallBudget",
    "Classification",
    "Classifier",
    "fallback_classification",
]
