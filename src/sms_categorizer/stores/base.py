from abc import ABC, abstractmethod
from collections.abc import Iterable

from sms_categorizer.models import Category, MerchantProfile


class MerchantStore(ABC):
    """
    Key-value store of merchant profiles keyed by normalized name.

    Implementations raise StoreUnavailableError when the backing
    storage cannot be read or written.
    """

    @abstractmethod
    def get(self, normalized_name: str) -> MerchantProfile | None:
        pass

    @abstractmethod
    def put(self, profile: MerchantProfile) -> None:
        pass

    @abstractmethod
    def find_by_token_overlap(self, tokens: Iterable[str]) -> list[MerchantProfile]:
        """Return profiles whose normalized name shares at least one token."""
        pass

    @abstractmethod
    def all(self) -> list[MerchantProfile]:
        pass


class KeywordStore(ABC):
    """Ordered keyword -> category id table. Order is match priority."""

    @abstractmethod
    def get(self, keyword: str) -> int | None:
        pass

    @abstractmethod
    def add(self, keyword: str, category_id: int, is_default: bool = False) -> None:
        pass

    @abstractmethod
    def remove(self, keyword: str) -> bool:
        pass

    @abstractmethod
    def items(self) -> list[tuple[str, int, bool]]:
        """Return ``(keyword, category_id, is_default)`` in priority order."""
        pass

    def keywords_for_category(self, category_id: int) -> list[str]:
        return [keyword for keyword, cat_id, _ in self.items() if cat_id == category_id]


class CategoryStore(ABC):
    @abstractmethod
    def get(self, category_id: int) -> Category | None:
        pass

    @abstractmethod
    def all(self) -> list[Category]:
        pass

    @abstractmethod
    def add(self, category: Category) -> None:
        pass

    @abstractmethod
    def uncategorized(self) -> Category:
        pass
