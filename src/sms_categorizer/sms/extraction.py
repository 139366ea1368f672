import re
from datetime import datetime
from decimal import Decimal, InvalidOperation

from sms_categorizer.domain.merchants import UNKNOWN_MERCHANT
from sms_categorizer.errors import AmbiguousDirectionError
from sms_categorizer.models import (
    RawTransactionFields,
    SmsMessage,
    Transaction,
    TransactionDirection,
    TransactionSource,
    TransactionType,
)

MAX_MERCHANT_LENGTH = 50

OUTGOING_WORDS = frozenset({"debited", "debit", "dr", "spent", "paid", "withdrawn", "sent"})
INCOMING_WORDS = frozenset({"credited", "credit", "cr", "received", "deposited", "refunded"})

# Abbreviations are only trusted when a template captures them explicitly.
_DIRECTION_SCAN = re.compile(
    r"\b(debited|credited|spent|paid|withdrawn|received|deposited|refunded|debit|credit)\b",
    re.IGNORECASE,
)
_TRANSFER_HINT = re.compile(r"\b(transfer(?:red)?|neft|imps|rtgs)\b", re.IGNORECASE)

FALLBACK_MERCHANT_PATTERNS = (
    r"(?i)\b(?:at|to|from)\s+([A-Za-z0-9\s&.-]+?)(?:\s+on|\s+dt|\.\s|\.$|,|$)",
    r"(?i)\b(?:paid to|received from)\s+([A-Za-z0-9\s&.-]+?)(?:\s+on|\.\s|\.$|,|$)",
    r"(?i)\btransaction at\s+([A-Za-z0-9\s&.-]+?)(?:\s+on|\.\s|\.$|,|$)",
)

FALLBACK_DATE_PATTERNS = (
    r"(\d{2}-\d{2}-\d{4}\s+\d{2}:\d{2}:\d{2})",
    r"(\d{2}/\d{2}/\d{4}\s+\d{2}:\d{2})",
    r"(\d{2}-\d{2}-\d{4})",
    r"(\d{2}/\d{2}/\d{4})",
    r"(\d{1,2}-[A-Za-z]{3}-\d{2,4})",
    r"(\d{2}-\d{2}-\d{2})\b",
    r"(\d{2}/\d{2}/\d{2})\b",
)

DATE_FORMATS = (
    "%d-%m-%Y %H:%M:%S",
    "%d/%m/%Y %H:%M:%S",
    "%d-%m-%Y %H:%M",
    "%d/%m/%Y %H:%M",
    "%d-%m-%y %H:%M:%S",
    "%d/%m/%y %H:%M:%S",
    "%d-%m-%y %H:%M",
    "%d/%m/%y %H:%M",
    "%d-%m-%Y",
    "%d/%m/%Y",
    "%d-%m-%y",
    "%d/%m/%y",
    "%d-%b-%Y",
    "%d-%b-%y",
    "%d %b %Y",
)

_AMOUNT_NOISE = re.compile(r"[₹$,\s]")
_AMOUNT_SHAPE = re.compile(r"\d+(?:\.\d*)?|\.\d+")
_CURRENCY_PREFIX = re.compile(r"^(?:rs\.?|inr)", re.IGNORECASE)


def extract_first(pattern: str | None, text: str, flags: int = 0) -> str | None:
    """Return the first non-empty capture group of ``pattern`` in ``text``, else the whole match."""
    if not pattern:
        return None
    match = re.search(pattern, text, flags)
    if not match:
        return None
    for group in match.groups():
        if group and group.strip():
            return group.strip()
    if match.groups():
        return None
    whole = match.group(0).strip()
    return whole or None


def parse_amount(text: str | None) -> Decimal | None:
    """
    Parse captured amount text as an exact Decimal.

    Thousands separators and currency symbols are dropped; anything
    else that is not a plain positive number yields None.
    """
    if not text:
        return None
    cleaned = _CURRENCY_PREFIX.sub("", _AMOUNT_NOISE.sub("", text))
    if not _AMOUNT_SHAPE.fullmatch(cleaned):
        return None
    try:
        amount = Decimal(cleaned)
    except InvalidOperation:
        return None
    if amount <= 0:
        return None
    return amount


def resolve_direction(text: str) -> TransactionDirection:
    for word in re.findall(r"[a-z]+", text.lower()):
        if word in OUTGOING_WORDS:
            return TransactionDirection.OUTGOING
        if word in INCOMING_WORDS:
            return TransactionDirection.INCOMING
    raise AmbiguousDirectionError(text)


def scan_direction(body: str) -> str | None:
    match = _DIRECTION_SCAN.search(body)
    return match.group(1) if match else None


def clean_merchant(text: str | None) -> str:
    if not text:
        return ""
    merchant = re.sub(r"\s+", " ", text.strip())
    merchant = re.sub(r"[^a-zA-Z0-9\s&.-]", "", merchant)
    return merchant[:MAX_MERCHANT_LENGTH].strip(" .-")


def clean_account_suffix(text: str | None) -> str | None:
    if not text:
        return None
    cleaned = re.sub(r"[^Xx\d]", "", text).upper()
    return cleaned or None


def fallback_merchant(body: str) -> str:
    for pattern in FALLBACK_MERCHANT_PATTERNS:
        merchant = clean_merchant(extract_first(pattern, body))
        if merchant:
            return merchant
    return ""


def fallback_date(body: str) -> str:
    for pattern in FALLBACK_DATE_PATTERNS:
        found = extract_first(pattern, body)
        if found:
            return found
    return ""


def parse_sms_date(text: str | None) -> datetime | None:
    if not text:
        return None
    value = re.sub(r"\s+", " ", text.strip())
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    return None


def transaction_type_for(direction: TransactionDirection, body: str = "") -> TransactionType:
    is_transfer = bool(_TRANSFER_HINT.search(body))
    if direction is TransactionDirection.INCOMING:
        return TransactionType.TRANSFER_IN if is_transfer else TransactionType.INCOME
    return TransactionType.TRANSFER_OUT if is_transfer else TransactionType.EXPENSE


def build_transaction(
    fields: RawTransactionFields,
    message: SmsMessage | None = None,
    account_id: int | None = None,
) -> Transaction:
    """
    Assemble a Transaction from matched fields.

    Missing merchants become UNKNOWN_MERCHANT; unparseable dates fall
    back to the message timestamp.
    """
    amount = parse_amount(fields.amount_text)
    if amount is None:
        raise ValueError(f"Unparseable amount: {fields.amount_text!r}")

    body = message.body if message else ""
    date = parse_sms_date(fields.date_text)
    if date is None:
        date = message.received_at if message else datetime.now()

    return Transaction(
        amount=amount,
        type=transaction_type_for(fields.direction, body),
        merchant=fields.merchant_text or UNKNOWN_MERCHANT,
        date=date,
        source=TransactionSource.SMS_AUTO,
        description=body or None,
        account_id=account_id,
    )
