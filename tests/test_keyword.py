import pytest

from sms_categorizer.classifiers.keyword import KeywordClassifier
from sms_categorizer.domain.categories import FOOD_AND_DINING, SHOPPING, TRANSPORTATION, default_category_map
from sms_categorizer.errors import StoreUnavailableError
from sms_categorizer.models import ReasonKind
from sms_categorizer.stores.memory import InMemoryCategoryStore, InMemoryKeywordStore


@pytest.fixture
def categories():
    return default_category_map()


@pytest.fixture
def classifier() -> KeywordClassifier:
    return KeywordClassifier(InMemoryKeywordStore(), InMemoryCategoryStore())


def test_default_keyword_match(classifier: KeywordClassifier) -> None:
    res = classifier.classify("SWIGGY*ORDER 1234")
    assert res is not None
    assert res.category.id == FOOD_AND_DINING
    assert res.confidence == 0.8
    assert res.reason is ReasonKind.KEYWORD_MATCH
    assert res.features == ["keyword:swiggy"]


def test_no_match(classifier: KeywordClassifier) -> None:
    assert classifier.classify("Ramesh Kirana") is None
    assert classifier.classify("") is None


def test_category_filter_skips_unavailable(classifier: KeywordClassifier, categories) -> None:
    # "amazon" maps to shopping; restricting to transportation leaves no hit
    assert classifier.classify("Amazon", categories=[categories[TRANSPORTATION]]) is None
    res = classifier.classify("Amazon", categories=[categories[SHOPPING]])
    assert res is not None and res.category.id == SHOPPING


def test_user_keyword_takes_priority(classifier: KeywordClassifier, categories) -> None:
    assert classifier.add_keyword_mapping("  Amazon Fresh ", categories[FOOD_AND_DINING]) == "amazon fresh"

    res = classifier.classify("AMAZON FRESH BLR")
    assert res is not None
    assert res.category.id == FOOD_AND_DINING
    assert res.confidence == 0.9
    assert res.reason is ReasonKind.USER_DEFINED

    assert "amazon fresh" in classifier.keywords_for_category(categories[FOOD_AND_DINING])


def test_add_empty_keyword_is_ignored(classifier: KeywordClassifier, categories) -> None:
    assert classifier.add_keyword_mapping("!!", categories[SHOPPING]) is None


def test_remove_keyword(classifier: KeywordClassifier) -> None:
    assert classifier.remove_keyword_mapping("Swiggy")
    assert classifier.classify("swiggy order") is None
    assert not classifier.remove_keyword_mapping("swiggy")


def test_custom_confidences(categories) -> None:
    classifier = KeywordClassifier(
        InMemoryKeywordStore(),
        InMemoryCategoryStore(),
        keyword_confidence=0.7,
        user_keyword_confidence=0.95,
    )
    assert classifier.classify("uber trip").confidence == 0.7
    classifier.add_keyword_mapping("rapido", categories[TRANSPORTATION])
    assert classifier.classify("rapido bike").confidence == 0.95


def test_store_failure_degrades_to_none() -> None:
    class BrokenKeywordStore(InMemoryKeywordStore):
        def items(self):
            raise StoreUnavailableError("disk gone")

    classifier = KeywordClassifier(BrokenKeywordStore(), InMemoryCategoryStore())
    assert classifier.classify("swiggy") is None
