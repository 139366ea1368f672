import re
from collections.abc import Iterable

from sms_categorizer.errors import AmbiguousDirectionError, NoTemplateMatchError
from sms_categorizer.logger import get_logger
from sms_categorizer.models import RawTransactionFields, SmsTemplate

from .extraction import (
    clean_account_suffix,
    clean_merchant,
    extract_first,
    fallback_date,
    fallback_merchant,
    parse_amount,
    resolve_direction,
    scan_direction,
)
from .templates import TemplateRegistry

logger = get_logger(__name__)


class PatternMatcher:
    """
    Applies bank templates to raw SMS text.

    Templates are scanned in priority order; the first active template
    of each bank whose sender pattern matches is tried, and the first
    one yielding both an amount and a direction wins.
    """

    def __init__(self, registry: TemplateRegistry | None = None, infer_direction: bool = True):
        self.registry = registry if registry is not None else TemplateRegistry.with_defaults()
        self.infer_direction = infer_direction

    def match(
        self,
        sender: str,
        body: str,
        templates: Iterable[SmsTemplate] | None = None,
    ) -> RawTransactionFields | None:
        if templates is None:
            templates = self.registry.active_templates()

        tried_banks: set[str] = set()
        for template in templates:
            if not template.is_active:
                continue
            bank_key = template.bank_name.lower()
            if bank_key in tried_banks:
                continue
            try:
                if not re.search(template.sender_pattern, sender, re.IGNORECASE):
                    continue
            except re.error as e:
                logger.warning("[SMS] Skipping template '%s': bad sender pattern (%s).", template.bank_name, e)
                continue

            tried_banks.add(bank_key)
            try:
                return self.apply(template, body)
            except (NoTemplateMatchError, AmbiguousDirectionError) as e:
                logger.debug("[SMS] Template '%s' rejected message from %s: %s", template.bank_name, sender, e)
            except re.error as e:
                logger.warning("[SMS] Skipping template '%s': bad body pattern (%s).", template.bank_name, e)

        logger.debug("[SMS] No template matched message from %s.", sender)
        return None

    def apply(self, template: SmsTemplate, body: str) -> RawTransactionFields:
        """
        Extract fields from ``body`` with a single template.

        Raises:
            NoTemplateMatchError: amount or direction could not be extracted.
            AmbiguousDirectionError: direction text is outside the vocabulary.
        """
        amount_text = extract_first(template.amount_pattern, body)
        if parse_amount(amount_text) is None:
            raise NoTemplateMatchError(f"no usable amount in message (captured {amount_text!r})")

        merchant_text = clean_merchant(extract_first(template.merchant_pattern, body))
        if not merchant_text:
            merchant_text = fallback_merchant(body)

        date_text = extract_first(template.date_pattern, body) or fallback_date(body)

        direction_text = extract_first(template.direction_pattern, body)
        if direction_text is None and self.infer_direction:
            direction_text = scan_direction(body)
        if direction_text is None:
            raise NoTemplateMatchError("no direction in message")
        direction = resolve_direction(direction_text)

        account_suffix = clean_account_suffix(extract_first(template.account_suffix_pattern, body))

        return RawTransactionFields(
            bank_name=template.bank_name,
            amount_text=amount_text,
            merchant_text=merchant_text,
            date_text=date_text,
            direction_text=direction_text,
            direction=direction,
            account_suffix=account_suffix,
        )


def match_sms(
    sender: str,
    body: str,
    templates: Iterable[SmsTemplate],
    infer_direction: bool = True,
) -> RawTransactionFields | None:
    return PatternMatcher(TemplateRegistry(), infer_direction=infer_direction).match(sender, body, templates)
