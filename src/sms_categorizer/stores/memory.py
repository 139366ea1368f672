import threading
from collections.abc import Iterable, Mapping

from sms_categorizer.domain.categories import DEFAULT_CATEGORIES, DEFAULT_KEYWORD_MAPPINGS, UNCATEGORIZED
from sms_categorizer.domain.merchants import merchant_tokens
from sms_categorizer.models import Category, MerchantProfile

from .base import CategoryStore, KeywordStore, MerchantStore


class InMemoryMerchantStore(MerchantStore):
    def __init__(self, profiles: Iterable[MerchantProfile] = ()):
        self._lock = threading.Lock()
        self.profiles: dict[str, MerchantProfile] = {}
        for profile in profiles:
            self.profiles[profile.normalized_name] = profile

    def get(self, normalized_name: str) -> MerchantProfile | None:
        with self._lock:
            profile = self.profiles.get(normalized_name)
        return profile.model_copy() if profile else None

    def put(self, profile: MerchantProfile) -> None:
        with self._lock:
            self.profiles[profile.normalized_name] = profile.model_copy()

    def find_by_token_overlap(self, tokens: Iterable[str]) -> list[MerchantProfile]:
        wanted = set(tokens)
        if not wanted:
            return []
        with self._lock:
            return [
                profile.model_copy()
                for key, profile in self.profiles.items()
                if merchant_tokens(key) & wanted
            ]

    def all(self) -> list[MerchantProfile]:
        with self._lock:
            return [profile.model_copy() for profile in self.profiles.values()]


class InMemoryKeywordStore(KeywordStore):
    """
    Keyword table with user mappings ahead of the seeded defaults.

    Within each group keywords keep insertion order; re-adding a
    keyword moves it into the group given by ``is_default``.
    """

    def __init__(self, defaults: Mapping[str, int] | None = None):
        self._lock = threading.Lock()
        self._user: dict[str, int] = {}
        self._defaults: dict[str, int] = {}
        seed = DEFAULT_KEYWORD_MAPPINGS if defaults is None else defaults
        for keyword, category_id in seed.items():
            self._defaults[keyword.lower().strip()] = category_id

    def get(self, keyword: str) -> int | None:
        key = keyword.lower().strip()
        with self._lock:
            if key in self._user:
                return self._user[key]
            return self._defaults.get(key)

    def add(self, keyword: str, category_id: int, is_default: bool = False) -> None:
        key = keyword.lower().strip()
        if not key:
            return
        with self._lock:
            self._user.pop(key, None)
            self._defaults.pop(key, None)
            target = self._defaults if is_default else self._user
            target[key] = category_id

    def remove(self, keyword: str) -> bool:
        key = keyword.lower().strip()
        with self._lock:
            removed_user = self._user.pop(key, None) is not None
            removed_default = self._defaults.pop(key, None) is not None
        return removed_user or removed_default

    def items(self) -> list[tuple[str, int, bool]]:
        with self._lock:
            user = [(keyword, cat_id, False) for keyword, cat_id in self._user.items()]
            defaults = [(keyword, cat_id, True) for keyword, cat_id in self._defaults.items()]
        return user + defaults


class InMemoryCategoryStore(CategoryStore):
    def __init__(self, categories: Iterable[Category] = DEFAULT_CATEGORIES, uncategorized_id: int = UNCATEGORIZED):
        self._lock = threading.Lock()
        self.categories: dict[int, Category] = {category.id: category for category in categories}
        self.uncategorized_id = uncategorized_id

    def get(self, category_id: int) -> Category | None:
        with self._lock:
            return self.categories.get(category_id)

    def all(self) -> list[Category]:
        with self._lock:
            return list(self.categories.values())

    def add(self, category: Category) -> None:
        with self._lock:
            self.categories[category.id] = category

    def uncategorized(self) -> Category:
        category = self.get(self.uncategorized_id)
        if category is None:
            category = Category(
                id=self.uncategorized_id,
                name="Uncategorized",
                icon="help_outline",
                is_default=True,
            )
        return category
