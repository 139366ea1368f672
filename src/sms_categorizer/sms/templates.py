import json
import os
import re
import threading
from collections.abc import Iterable

from pydantic import ValidationError

from sms_categorizer.errors import InvalidTemplateError
from sms_categorizer.logger import get_logger
from sms_categorizer.models import SmsTemplate

logger = get_logger(__name__)

_AMOUNT = r"(?i)(?:Rs\.?|INR|₹)\s*([\d,]+(?:\.\d+)?)"
_MERCHANT = r"(?i)\b(?:at|to|from)\s+([A-Za-z0-9\s&.-]+?)(?:\s+on|\s+dt|\.\s|\.$|,|$)"
_DATE = r"(\d{2}-\d{2}-\d{4}(?:\s+\d{2}:\d{2}:\d{2})?|\d{2}/\d{2}/\d{4}|\d{1,2}-[A-Za-z]{3}-\d{2,4})"
_BANK_DIRECTION = r"(?i)\b(debited|credited|debit|credit)\b"
_WALLET_DIRECTION = r"(?i)\b(debited|credited|debit|credit|paid|received)\b"
_ACCOUNT_NO = r"(?i)(?:A/c|account)\s+(?:no\.?)?\s*([X\d]+)"
_CARD_ENDING = r"(?i)(?:card|account)\s+(?:ending\s+)?([X\d]+)"
_WALLET_ENDING = r"(?i)(?:wallet|account)\s+(?:ending\s+)?([X\d]+)"


def _bank(template_id: int, bank_name: str, sender_pattern: str, direction: str, account: str) -> SmsTemplate:
    return SmsTemplate(
        id=template_id,
        bank_name=bank_name,
        sender_pattern=sender_pattern,
        amount_pattern=_AMOUNT,
        merchant_pattern=_MERCHANT,
        date_pattern=_DATE,
        direction_pattern=direction,
        account_suffix_pattern=account,
    )


DEFAULT_TEMPLATES: tuple[SmsTemplate, ...] = (
    _bank(1, "HDFC Bank", r"HDFC", _BANK_DIRECTION, _ACCOUNT_NO),
    _bank(2, "ICICI Bank", r"ICICI", _BANK_DIRECTION, _CARD_ENDING),
    _bank(3, "State Bank of India", r"SBI", _BANK_DIRECTION, _ACCOUNT_NO),
    _bank(4, "Axis Bank", r"AXIS|AXIBNK", _BANK_DIRECTION, _CARD_ENDING),
    _bank(5, "Kotak Mahindra Bank", r"KOTAK|KMB", _BANK_DIRECTION, _ACCOUNT_NO),
    _bank(6, "Paytm Payments Bank", r"PAYTM|PYTM", _WALLET_DIRECTION, _WALLET_ENDING),
    _bank(7, "PhonePe", r"PHONEPE|PHONPE", _WALLET_DIRECTION, _WALLET_ENDING),
    _bank(8, "Google Pay", r"GPAY|GOOGLEPAY", _WALLET_DIRECTION, _WALLET_ENDING),
)


def validate_template(template: SmsTemplate) -> None:
    """Compile every pattern of ``template``; raise InvalidTemplateError on the first bad one."""
    patterns = {
        "sender_pattern": template.sender_pattern,
        "amount_pattern": template.amount_pattern,
        "direction_pattern": template.direction_pattern,
        "merchant_pattern": template.merchant_pattern,
        "date_pattern": template.date_pattern,
        "account_suffix_pattern": template.account_suffix_pattern,
    }
    for field, pattern in patterns.items():
        if pattern is None:
            continue
        try:
            re.compile(pattern)
        except re.error as e:
            raise InvalidTemplateError(
                f"Template '{template.bank_name}' has an invalid {field}: {e}"
            ) from e


class TemplateRegistry:
    """
    Ordered set of SMS templates. Registration order is match priority.
    """

    def __init__(self, templates: Iterable[SmsTemplate] = ()):
        self._lock = threading.Lock()
        self._templates: dict[int, SmsTemplate] = {}
        self._next_id = 1
        for template in templates:
            self.register(template)

    @classmethod
    def with_defaults(cls) -> "TemplateRegistry":
        return cls(DEFAULT_TEMPLATES)

    @classmethod
    def from_file(cls, path: str) -> "TemplateRegistry":
        """
        Load templates from a JSON file shaped like ``{"templates": [...]}``.

        Raises:
            InvalidTemplateError: unreadable file, bad JSON or bad template.
        """
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise InvalidTemplateError(f"Cannot load templates from {path}: {e}") from e

        raw_templates = data.get("templates") if isinstance(data, dict) else None
        if not isinstance(raw_templates, list):
            raise InvalidTemplateError(f"{path} must contain a 'templates' list")

        templates = []
        for raw in raw_templates:
            try:
                templates.append(SmsTemplate.model_validate(raw))
            except ValidationError as e:
                raise InvalidTemplateError(f"Invalid template in {path}: {e}") from e

        logger.info("[SMS] Loaded %d templates from %s.", len(templates), path)
        return cls(templates)

    @classmethod
    def load(cls, path: str | None) -> "TemplateRegistry":
        if path and os.path.exists(path):
            return cls.from_file(path)
        if path:
            logger.warning("[SMS] Template file %s not found; using built-in templates.", path)
        return cls.with_defaults()

    def register(self, template: SmsTemplate) -> SmsTemplate:
        validate_template(template)
        with self._lock:
            if template.id == 0:
                template = template.model_copy(update={"id": self._next_id})
            self._templates[template.id] = template
            self._next_id = max(self._next_id, template.id + 1)
        return template

    def get(self, template_id: int) -> SmsTemplate | None:
        with self._lock:
            return self._templates.get(template_id)

    def remove(self, template_id: int) -> bool:
        with self._lock:
            return self._templates.pop(template_id, None) is not None

    def activate(self, template_id: int) -> bool:
        return self._set_active(template_id, True)

    def deactivate(self, template_id: int) -> bool:
        return self._set_active(template_id, False)

    def _set_active(self, template_id: int, active: bool) -> bool:
        with self._lock:
            template = self._templates.get(template_id)
            if template is None:
                return False
            self._templates[template_id] = template.model_copy(update={"is_active": active})
            return True

    def all(self) -> list[SmsTemplate]:
        with self._lock:
            return list(self._templates.values())

    def active_templates(self) -> list[SmsTemplate]:
        return [template for template in self.all() if template.is_active]

    def templates_for_bank(self, bank_name: str) -> list[SmsTemplate]:
        wanted = bank_name.lower()
        return [t for t in self.active_templates() if t.bank_name.lower() == wanted]

    def find_by_sender(self, sender: str) -> SmsTemplate | None:
        for template in self.active_templates():
            if re.search(template.sender_pattern, sender, re.IGNORECASE):
                return template
        return None

    def __len__(self) -> int:
        with self._lock:
            return len(self._templates)
