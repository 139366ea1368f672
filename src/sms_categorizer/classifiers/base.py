from abc import ABC, abstractmethod
from collections.abc import Iterable

from sms_categorizer.models import CategorizationResult, Category
from sms_categorizer.stores.base import CategoryStore


class Classifier(ABC):
    def __init__(self, category_store: CategoryStore):
        self.category_store = category_store

    @abstractmethod
    def classify(
        self, merchant: str, categories: Iterable[Category] | None = None
    ) -> CategorizationResult | None:
        """Attempt to categorize the merchant, restricted to ``categories`` when given."""
        pass

    @abstractmethod
    def learn(self, merchant: str, category: Category) -> object:
        """Learn from a confirmed merchant-category pair."""
        pass

    def available_categories(self, categories: Iterable[Category] | None = None) -> dict[int, Category]:
        if categories is None:
            categories = self.category_store.all()
        return {category.id: category for category in categories}
