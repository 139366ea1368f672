from datetime import datetime
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from sms_categorizer.domain.categories import (
    ENTERTAINMENT,
    FOOD_AND_DINING,
    SHOPPING,
    UNCATEGORIZED,
    default_category_map,
)
from sms_categorizer.errors import LearningPersistenceError, StoreUnavailableError
from sms_categorizer.manager import CategorizerService
from sms_categorizer.models import (
    CategorizationResult,
    Category,
    MerchantProfile,
    ReasonKind,
    Transaction,
    TransactionType,
)
from sms_categorizer.stores.memory import InMemoryMerchantStore


@pytest.fixture
def categories():
    return default_category_map()


@pytest.fixture
def service() -> CategorizerService:
    return CategorizerService()


def test_orchestration_priority(service: CategorizerService) -> None:
    keyword = MagicMock()
    merchant = MagicMock()
    service.classifiers = [keyword, merchant]
    shopping = Category(id=SHOPPING, name="Shopping")

    # Case 1: keyword matches
    keyword.classify.return_value = CategorizationResult(
        category=shopping, confidence=0.8, reason=ReasonKind.KEYWORD_MATCH
    )
    res = service.categorize("Amazon")
    assert res.reason is ReasonKind.KEYWORD_MATCH
    merchant.classify.assert_not_called()

    # Case 2: keyword below threshold, history matches
    keyword.classify.return_value = CategorizationResult(
        category=shopping, confidence=0.5, reason=ReasonKind.KEYWORD_MATCH
    )
    merchant.classify.return_value = CategorizationResult(
        category=shopping, confidence=0.9, reason=ReasonKind.MERCHANT_HISTORY
    )
    res = service.categorize("Amazon")
    assert res.reason is ReasonKind.MERCHANT_HISTORY

    # Case 3: nothing confident
    merchant.classify.return_value = None
    res = service.categorize("Amazon")
    assert res.category.id == UNCATEGORIZED
    assert res.confidence == 0.0
    assert res.reason is ReasonKind.NONE


def test_keyword_wins_over_history(service: CategorizerService, categories) -> None:
    service.learn_from_user_input("Swiggy", categories[ENTERTAINMENT])

    res = service.categorize("Swiggy")

    assert res.category.id == FOOD_AND_DINING
    assert res.reason is ReasonKind.KEYWORD_MATCH


def test_history_used_when_no_keyword(service: CategorizerService, categories) -> None:
    assert service.categorize("Ramesh Kirana").reason is ReasonKind.NONE

    service.learn_from_user_input("Ramesh Kirana", categories[SHOPPING])
    res = service.categorize("RAMESH KIRANA")

    assert res.category.id == SHOPPING
    assert res.confidence == 0.9
    assert res.reason is ReasonKind.MERCHANT_HISTORY


@pytest.mark.parametrize("merchant", ["", "   ", "!!!"])
def test_categorize_never_raises_on_empty(service: CategorizerService, merchant: str) -> None:
    res = service.categorize(merchant)
    assert res.category.name == "Uncategorized"
    assert res.confidence == 0.0


def test_categorize_survives_store_failure(categories) -> None:
    class BrokenMerchantStore(InMemoryMerchantStore):
        def get(self, normalized_name):
            raise StoreUnavailableError("disk gone")

    service = CategorizerService(merchant_store=BrokenMerchantStore())
    assert service.categorize("Ramesh Kirana").reason is ReasonKind.NONE
    assert service.categorize("zomato").category.id == FOOD_AND_DINING


def test_categorize_transaction_returns_copy(service: CategorizerService) -> None:
    transaction = Transaction(
        amount=Decimal("120.00"),
        type=TransactionType.EXPENSE,
        merchant="UBER INDIA",
        date=datetime(2024, 1, 1),
    )

    categorized, result = service.categorize_transaction(transaction)

    assert transaction.category_id is None
    assert categorized.category_id == result.category.id
    assert categorized.amount == Decimal("120.00")


def test_learn_from_transaction(service: CategorizerService, categories) -> None:
    transaction = Transaction(
        amount=Decimal("80"),
        type=TransactionType.EXPENSE,
        merchant="Chai Point",
        date=datetime(2024, 1, 1),
    )
    profile = service.learn_from_user_input(transaction, categories[FOOD_AND_DINING])
    assert profile.normalized_name == "chai point"
    assert service.get_confidence("chai point", categories[FOOD_AND_DINING]) == 0.9


def test_learn_persistence_failure_propagates(categories) -> None:
    class ReadOnlyMerchantStore(InMemoryMerchantStore):
        def put(self, profile):
            raise StoreUnavailableError("read-only")

    service = CategorizerService(merchant_store=ReadOnlyMerchantStore())
    with pytest.raises(LearningPersistenceError):
        service.learn_from_user_input("Chai Point", categories[FOOD_AND_DINING])


def test_suggest_categories(categories) -> None:
    store = InMemoryMerchantStore([
        MerchantProfile(name="Amazon Fresh", normalized_name="amazon fresh",
                        category_id=FOOD_AND_DINING, confidence=0.9, observation_count=3),
    ])
    service = CategorizerService(merchant_store=store)

    suggestions = service.suggest_categories("Amazon Pay")

    assert [s.category.id for s in suggestions] == [SHOPPING, FOOD_AND_DINING]
    assert suggestions[0].reason is ReasonKind.KEYWORD_MATCH
    assert suggestions[1].confidence == pytest.approx(0.9 * 0.8)


def test_suggest_categories_dedupes_and_limits(service: CategorizerService, categories) -> None:
    service.learn_from_user_input("Amazon", categories[SHOPPING])

    suggestions = service.suggest_categories("Amazon")

    assert [s.category.id for s in suggestions] == [SHOPPING]
    assert suggestions[0].reason is ReasonKind.MERCHANT_HISTORY
    assert service.suggest_categories("Amazon", limit=0) == []


def test_keyword_mapping_round_trip(service: CategorizerService, categories) -> None:
    assert service.add_keyword_mapping("Rapido", categories[SHOPPING]) == "rapido"
    res = service.categorize("rapido bike taxi")
    assert res.category.id == SHOPPING
    assert res.reason is ReasonKind.USER_DEFINED

    assert service.remove_keyword_mapping("rapido")
    assert service.categorize("rapido bike taxi").reason is ReasonKind.KEYWORD_MATCH


def test_categories_and_normalizer(service: CategorizerService) -> None:
    assert len(service.get_categories()) == 10
    assert service.get_category(SHOPPING).name == "Shopping"
    assert service.get_category(999) is None
    assert CategorizerService.normalize_merchant_name("AMAZON.com Pvt Ltd") == "amazon com"


def test_from_data_dir_persists(tmp_path, categories) -> None:
    service = CategorizerService.from_data_dir(str(tmp_path))
    service.learn_from_user_input("Ramesh Kirana", categories[SHOPPING])
    service.add_keyword_mapping("chai", categories[FOOD_AND_DINING])

    reloaded = CategorizerService.from_data_dir(str(tmp_path))

    assert reloaded.categorize("Ramesh Kirana").reason is ReasonKind.MERCHANT_HISTORY
    assert reloaded.categorize("chai wala").reason is ReasonKind.USER_DEFINED
