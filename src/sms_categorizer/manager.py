import os
from collections.abc import Iterable

from sms_categorizer.classifiers.base import Classifier
from sms_categorizer.classifiers.keyword import (
    KEYWORD_CONFIDENCE,
    USER_KEYWORD_CONFIDENCE,
    KeywordClassifier,
)
from sms_categorizer.classifiers.merchant import MIN_CONFIDENCE, MerchantHistoryClassifier
from sms_categorizer.domain.categories import UNCATEGORIZED
from sms_categorizer.domain.merchants import normalize_merchant_name
from sms_categorizer.errors import StoreUnavailableError
from sms_categorizer.logger import get_logger
from sms_categorizer.models import CategorizationResult, Category, MerchantProfile, ReasonKind, Transaction
from sms_categorizer.stores.base import CategoryStore, KeywordStore, MerchantStore
from sms_categorizer.stores.json_store import JsonKeywordStore, JsonMerchantStore
from sms_categorizer.stores.memory import InMemoryCategoryStore, InMemoryKeywordStore, InMemoryMerchantStore

logger = get_logger(__name__)

SIMILAR_SUGGESTION_FACTOR = 0.8
MAX_SIMILAR_SUGGESTIONS = 3
MAX_SUGGESTIONS = 5


class CategorizerService:
    """
    Runs the classifier layers in order and owns the learning entry point.

    Keyword lookup is tried first, merchant history second; a result
    below ``min_confidence`` counts as no result. When nothing is
    confident the Uncategorized category is returned with confidence 0.
    """

    def __init__(self,
                 merchant_store: MerchantStore | None = None,
                 keyword_store: KeywordStore | None = None,
                 category_store: CategoryStore | None = None,
                 keyword_confidence: float = KEYWORD_CONFIDENCE,
                 user_keyword_confidence: float = USER_KEYWORD_CONFIDENCE,
                 min_confidence: float = MIN_CONFIDENCE):

        self.category_store = category_store or InMemoryCategoryStore()
        self.min_confidence = min_confidence

        # 1. Keyword lookup (fast path)
        self.keyword = KeywordClassifier(
            keyword_store or InMemoryKeywordStore(),
            self.category_store,
            keyword_confidence=keyword_confidence,
            user_keyword_confidence=user_keyword_confidence,
        )

        # 2. Merchant history (adaptive)
        self.merchant = MerchantHistoryClassifier(
            merchant_store or InMemoryMerchantStore(),
            self.category_store,
        )

        self.classifiers: list[Classifier] = [self.keyword, self.merchant]

    @classmethod
    def from_data_dir(cls, data_dir: str = ".", **kwargs) -> "CategorizerService":
        return cls(
            merchant_store=JsonMerchantStore(os.path.join(data_dir, "merchants.json")),
            keyword_store=JsonKeywordStore(os.path.join(data_dir, "keywords.json")),
            **kwargs,
        )

    def categorize(
        self, merchant: str, categories: Iterable[Category] | None = None
    ) -> CategorizationResult:
        if categories is not None:
            categories = list(categories)

        for classifier in self.classifiers:
            classifier_name = classifier.__class__.__name__
            logger.debug(f"Trying {classifier_name} for: '{merchant[:50]}'")

            try:
                result = classifier.classify(merchant, categories=categories)
            except StoreUnavailableError as e:
                logger.warning(f"{classifier_name} unavailable: {e}")
                result = None

            if result and result.confidence >= self.min_confidence:
                logger.debug(
                    f"{classifier_name} returned: '{result.category.name}' "
                    f"(confidence: {result.confidence:.2f}, reason: {result.reason.value})"
                )
                return result
            logger.debug(f"{classifier_name} returned: None")

        logger.debug(f"No classifier matched for: '{merchant[:50]}'")
        return self._uncategorized()

    def categorize_transaction(self, transaction: Transaction) -> tuple[Transaction, CategorizationResult]:
        result = self.categorize(transaction.merchant)
        categorized = transaction.model_copy(update={"category_id": result.category.id})
        return categorized, result

    def learn_from_user_input(
        self, merchant: str | Transaction, category: Category
    ) -> MerchantProfile | None:
        """
        Teach the merchant history layer a user-confirmed category.

        Returns None when the merchant has no usable name.

        Raises:
            LearningPersistenceError: the correction was not stored.
        """
        if isinstance(merchant, Transaction):
            merchant = merchant.merchant
        return self.merchant.learn(merchant, category)

    def suggest_categories(self, merchant: str, limit: int = MAX_SUGGESTIONS) -> list[CategorizationResult]:
        suggestions: list[CategorizationResult] = []
        seen: set[int] = set()

        def add(result: CategorizationResult | None) -> None:
            if result and result.category.id not in seen:
                seen.add(result.category.id)
                suggestions.append(result)

        add(self._safe_classify(self.merchant, merchant))
        add(self._safe_classify(self.keyword, merchant))

        for similar in self.merchant.find_similar_merchants(merchant)[:MAX_SIMILAR_SUGGESTIONS]:
            result = self._safe_classify(self.merchant, similar)
            if result:
                add(result.model_copy(update={"confidence": result.confidence * SIMILAR_SUGGESTION_FACTOR}))

        suggestions.sort(key=lambda r: r.confidence, reverse=True)
        return suggestions[:limit]

    def get_confidence(self, merchant: str, category: Category) -> float:
        for classifier in (self.merchant, self.keyword):
            result = self._safe_classify(classifier, merchant, [category])
            if result:
                return result.confidence
        return 0.0

    def add_keyword_mapping(self, keyword: str, category: Category) -> str | None:
        return self.keyword.add_keyword_mapping(keyword, category)

    def remove_keyword_mapping(self, keyword: str) -> bool:
        return self.keyword.remove_keyword_mapping(keyword)

    def get_categories(self) -> list[Category]:
        return self.category_store.all()

    def get_category(self, category_id: int) -> Category | None:
        return self.category_store.get(category_id)

    @staticmethod
    def normalize_merchant_name(raw: str) -> str:
        return normalize_merchant_name(raw)

    def _safe_classify(
        self,
        classifier: Classifier,
        merchant: str,
        categories: list[Category] | None = None,
    ) -> CategorizationResult | None:
        try:
            return classifier.classify(merchant, categories=categories)
        except StoreUnavailableError as e:
            logger.warning(f"{classifier.__class__.__name__} unavailable: {e}")
            return None

    def _uncategorized(self) -> CategorizationResult:
        try:
            category = self.category_store.uncategorized()
        except StoreUnavailableError:
            category = Category(id=UNCATEGORIZED, name="Uncategorized", is_default=True)
        return CategorizationResult(
            category=category,
            confidence=0.0,
            reason=ReasonKind.NONE,
        )
