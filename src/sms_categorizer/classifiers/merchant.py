from collections.abc import Iterable

from sms_categorizer.domain.merchants import (
    is_learnable_merchant,
    jaccard_similarity,
    merchant_tokens,
    normalize_merchant_name,
)
from sms_categorizer.errors import LearningPersistenceError, StoreUnavailableError
from sms_categorizer.locks import KeyedLock
from sms_categorizer.logger import get_logger
from sms_categorizer.models import CategorizationResult, Category, MerchantProfile, ReasonKind
from sms_categorizer.stores.base import CategoryStore, MerchantStore

from .base import Classifier

logger = get_logger(__name__)

MIN_CONFIDENCE = 0.6
EXACT_MATCH_CONFIDENCE = 0.9
MIN_OBSERVATIONS = 2
MIN_TOKEN_LENGTH = 3


def updated_confidence(confidence: float, observation_count: int, same_category: bool) -> float:
    """
    Recency-weighted online update with a diminishing learning rate.

    Floors at MIN_CONFIDENCE, so conflicting feedback never drives a
    profile below the acceptance threshold.
    """
    weight = 1.0 / (observation_count + 1)
    target = 1.0 if same_category else 0.0
    value = confidence * (1 - weight) + target * weight
    return min(1.0, max(MIN_CONFIDENCE, value))


class MerchantHistoryClassifier(Classifier):
    def __init__(
        self,
        merchant_store: MerchantStore,
        category_store: CategoryStore,
        locks: KeyedLock | None = None,
    ):
        super().__init__(category_store)
        self.merchant_store = merchant_store
        self.locks = locks or KeyedLock()

    def classify(
        self, merchant: str, categories: Iterable[Category] | None = None
    ) -> CategorizationResult | None:
        key = normalize_merchant_name(merchant)
        if not key:
            return None

        try:
            available = self.available_categories(categories)
            exact = self.merchant_store.get(key)
            if (
                exact is not None
                and exact.category_id is not None
                and exact.confidence >= MIN_CONFIDENCE
                and exact.category_id in available
            ):
                return CategorizationResult(
                    category=available[exact.category_id],
                    confidence=exact.confidence,
                    reason=ReasonKind.MERCHANT_HISTORY,
                )
            candidates = self._similar_profiles(key)
        except StoreUnavailableError as e:
            logger.warning(f"[MERCHANT] Store unavailable, skipping history layer: {e}")
            return None

        eligible = [
            profile
            for profile in candidates
            if profile.category_id is not None
            and profile.confidence >= MIN_CONFIDENCE
            and profile.observation_count >= MIN_OBSERVATIONS
        ]
        if not eligible:
            return None

        best = max(eligible, key=lambda profile: profile.confidence * profile.observation_count)
        category = available.get(best.category_id)
        if category is None:
            return None

        similarity = jaccard_similarity(merchant_tokens(key), merchant_tokens(best.normalized_name))
        adjusted = best.confidence * similarity
        logger.debug(
            f"[MERCHANT] '{key}' ~ '{best.normalized_name}': similarity {similarity:.2f}, "
            f"adjusted confidence {adjusted:.2f}"
        )
        if adjusted < MIN_CONFIDENCE:
            return None

        return CategorizationResult(
            category=category,
            confidence=adjusted,
            reason=ReasonKind.SIMILAR_MERCHANT,
            features=[f"similar_merchant:{best.name}"],
        )

    def learn(self, merchant: str, category: Category) -> MerchantProfile | None:
        """
        Record a confirmed category for ``merchant``.

        Returns None without touching the store when the merchant is
        empty or the unknown-merchant placeholder.

        Raises:
            LearningPersistenceError: the profile could not be read or
                stored; the caller should retry.
        """
        key = normalize_merchant_name(merchant)
        if not is_learnable_merchant(key):
            logger.info(f"[LEARN] Skipping '{merchant[:50]}': no usable merchant name.")
            return None
        with self.locks.hold(key):
            try:
                existing = self.merchant_store.get(key)
                if existing is None:
                    profile = MerchantProfile(
                        name=merchant,
                        normalized_name=key,
                        category_id=category.id,
                        confidence=EXACT_MATCH_CONFIDENCE,
                        observation_count=1,
                    )
                else:
                    same_category = existing.category_id == category.id
                    confidence = updated_confidence(
                        existing.confidence, existing.observation_count, same_category
                    )
                    category_id = existing.category_id
                    if confidence >= MIN_CONFIDENCE:
                        category_id = category.id
                    profile = existing.model_copy(update={
                        "category_id": category_id,
                        "confidence": confidence,
                        "observation_count": existing.observation_count + 1,
                    })
                self.merchant_store.put(profile)
            except StoreUnavailableError as e:
                logger.error(f"[LEARN] Could not persist '{key}' -> {category.name}: {e}")
                raise LearningPersistenceError(merchant, e) from e

        logger.info(
            f"[LEARN] '{key}' -> {category.name} "
            f"(confidence: {profile.confidence:.2f}, observations: {profile.observation_count})"
        )
        return profile

    def get_profile(self, merchant: str) -> MerchantProfile | None:
        return self.merchant_store.get(normalize_merchant_name(merchant))

    def find_similar_merchants(self, merchant: str) -> list[str]:
        key = normalize_merchant_name(merchant)
        try:
            profiles = self._similar_profiles(key)
        except StoreUnavailableError as e:
            logger.warning(f"[MERCHANT] Store unavailable while finding similar merchants: {e}")
            return []
        return [profile.name for profile in profiles if profile.normalized_name != key]

    def _similar_profiles(self, key: str) -> list[MerchantProfile]:
        tokens = merchant_tokens(key, min_length=MIN_TOKEN_LENGTH)
        if not tokens:
            return []
        return self.merchant_store.find_by_token_overlap(tokens)
