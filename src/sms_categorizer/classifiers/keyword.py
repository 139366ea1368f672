from collections.abc import Iterable

from sms_categorizer.domain.merchants import normalize_merchant_name
from sms_categorizer.errors import StoreUnavailableError
from sms_categorizer.logger import get_logger
from sms_categorizer.models import CategorizationResult, Category, ReasonKind
from sms_categorizer.stores.base import CategoryStore, KeywordStore

from .base import Classifier

logger = get_logger(__name__)

KEYWORD_CONFIDENCE = 0.8
USER_KEYWORD_CONFIDENCE = 0.9


class KeywordClassifier(Classifier):
    """
    First-pass classifier: substring lookup of known keywords.

    Matches are taken in keyword-table order, first hit wins. Seeded
    default keywords report ``keyword_confidence``; keywords added at
    runtime report ``user_keyword_confidence`` with a ``user_defined``
    reason.
    """

    def __init__(
        self,
        keyword_store: KeywordStore,
        category_store: CategoryStore,
        keyword_confidence: float = KEYWORD_CONFIDENCE,
        user_keyword_confidence: float = USER_KEYWORD_CONFIDENCE,
    ):
        super().__init__(category_store)
        self.keyword_store = keyword_store
        self.keyword_confidence = keyword_confidence
        self.user_keyword_confidence = user_keyword_confidence

    def classify(
        self, merchant: str, categories: Iterable[Category] | None = None
    ) -> CategorizationResult | None:
        normalized = normalize_merchant_name(merchant)
        if not normalized:
            return None

        try:
            available = self.available_categories(categories)
            keywords = self.keyword_store.items()
        except StoreUnavailableError as e:
            logger.warning(f"[KEYWORD] Store unavailable, skipping keyword layer: {e}")
            return None

        for keyword, category_id, is_default in keywords:
            if keyword not in normalized:
                continue
            category = available.get(category_id)
            if category is None:
                continue
            logger.debug(f"[KEYWORD] '{keyword}' matched '{normalized}' -> {category.name}")
            if is_default:
                return CategorizationResult(
                    category=category,
                    confidence=self.keyword_confidence,
                    reason=ReasonKind.KEYWORD_MATCH,
                    features=[f"keyword:{keyword}"],
                )
            return CategorizationResult(
                category=category,
                confidence=self.user_keyword_confidence,
                reason=ReasonKind.USER_DEFINED,
                features=[f"keyword:{keyword}"],
            )

        return None

    def learn(self, merchant: str, category: Category) -> None:
        # Keyword mappings change only through explicit add/remove.
        pass

    def add_keyword_mapping(self, keyword: str, category: Category) -> str | None:
        normalized = normalize_merchant_name(keyword)
        if not normalized:
            return None
        self.keyword_store.add(normalized, category.id, is_default=False)
        logger.info(f"[KEYWORD] Mapped '{normalized}' -> {category.name}")
        return normalized

    def remove_keyword_mapping(self, keyword: str) -> bool:
        normalized = normalize_merchant_name(keyword) or keyword.lower().strip()
        return self.keyword_store.remove(normalized)

    def keywords_for_category(self, category: Category) -> list[str]:
        return self.keyword_store.keywords_for_category(category.id)
