import re

UNKNOWN_MERCHANT = "Unknown Merchant"

_NON_ALNUM = re.compile(r"[^a-z0-9\s]")
_CORPORATE_SUFFIXES = re.compile(r"\b(?:pvt|ltd|llc|inc|corp|co|company|limited)\b")
_WHITESPACE = re.compile(r"\s+")


def normalize_merchant_name(raw: str) -> str:
    """
    Canonicalize a merchant string into its comparison key.

    Lowercases, blanks out punctuation, drops corporate suffix words
    and collapses whitespace, so ``"AMAZON.com Pvt Ltd"`` becomes
    ``"amazon com"``. The result is stable under re-normalization.
    """
    if not raw:
        return ""
    key = _NON_ALNUM.sub(" ", raw.lower())
    key = _CORPORATE_SUFFIXES.sub(" ", key)
    return _WHITESPACE.sub(" ", key).strip()


def merchant_tokens(key: str, min_length: int = 1) -> set[str]:
    return {token for token in key.split() if len(token) >= min_length}


def jaccard_similarity(first: set[str], second: set[str]) -> float:
    union = first | second
    if not union:
        return 0.0
    return len(first & second) / len(union)


def merchant_similarity(first: str, second: str) -> float:
    return jaccard_similarity(
        merchant_tokens(normalize_merchant_name(first)),
        merchant_tokens(normalize_merchant_name(second)),
    )


def is_learnable_merchant(key: str) -> bool:
    """False for empty keys and the placeholder used when no merchant was parsed."""
    return bool(key) and key != normalize_merchant_name(UNKNOWN_MERCHANT)
