import asyncio
from collections.abc import Iterable
from dataclasses import dataclass

from sms_categorizer.logger import get_logger
from sms_categorizer.manager import CategorizerService
from sms_categorizer.models import (
    CategorizationResult,
    Category,
    MerchantProfile,
    RawTransactionFields,
    SmsMessage,
    Transaction,
)
from sms_categorizer.services.accounts import AccountDirectory
from sms_categorizer.sms.extraction import build_transaction
from sms_categorizer.sms.matcher import PatternMatcher

logger = get_logger(__name__)


@dataclass(frozen=True)
class ProcessedSms:
    message: SmsMessage
    fields: RawTransactionFields
    transaction: Transaction
    result: CategorizationResult


class SmsIngestionPipeline:
    """
    One SMS in, one categorized transaction (or nothing) out.

    Each message is an independent unit of work; the synchronous core
    runs in a worker thread so the event loop is never blocked.
    """

    def __init__(
        self,
        service: CategorizerService,
        matcher: PatternMatcher,
        accounts: AccountDirectory | None = None,
    ) -> None:
        self.service = service
        self.matcher = matcher
        self.accounts = accounts or AccountDirectory()

    def process_sync(self, message: SmsMessage) -> ProcessedSms | None:
        fields = self.matcher.match(message.sender, message.body)
        if fields is None:
            logger.debug("[SMS] Dropped message from %s: no template match.", message.sender)
            return None

        account_id = self.accounts.resolve(fields.bank_name, fields.account_suffix)
        candidate = build_transaction(fields, message, account_id=account_id)
        transaction, result = self.service.categorize_transaction(candidate)

        logger.info(
            "[SMS] %s %s %s at '%s' -> %s (confidence: %.2f, reason: %s)",
            fields.bank_name,
            transaction.type.value,
            transaction.amount,
            transaction.merchant,
            result.category.name,
            result.confidence,
            result.reason.value,
        )
        return ProcessedSms(message=message, fields=fields, transaction=transaction, result=result)

    async def process(self, message: SmsMessage) -> ProcessedSms | None:
        return await asyncio.to_thread(self.process_sync, message)

    async def process_many(self, messages: Iterable[SmsMessage]) -> list[ProcessedSms]:
        results = await asyncio.gather(*(self.process(message) for message in messages))
        return [processed for processed in results if processed is not None]

    async def learn(self, transaction: Transaction | str, category: Category) -> MerchantProfile | None:
        return await asyncio.to_thread(self.service.learn_from_user_input, transaction, category)
