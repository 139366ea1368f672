from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class TransactionDirection(str, Enum):
    OUTGOING = "outgoing"
    INCOMING = "incoming"


class TransactionType(str, Enum):
    EXPENSE = "expense"
    INCOME = "income"
    TRANSFER_OUT = "transfer_out"
    TRANSFER_IN = "transfer_in"


class TransactionSource(str, Enum):
    SMS_AUTO = "sms_auto"
    MANUAL = "manual"
    IMPORTED = "imported"


class ReasonKind(str, Enum):
    KEYWORD_MATCH = "keyword_match"
    MERCHANT_HISTORY = "merchant_history"
    SIMILAR_MERCHANT = "similar_merchant"
    USER_DEFINED = "user_defined"
    NONE = "none"


class SmsTemplate(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int = 0
    bank_name: str
    sender_pattern: str
    amount_pattern: str
    direction_pattern: str
    merchant_pattern: Optional[str] = None
    date_pattern: Optional[str] = None
    account_suffix_pattern: Optional[str] = None
    is_active: bool = True


class SmsMessage(BaseModel):
    sender: str
    body: str
    received_at: datetime = Field(default_factory=datetime.now)


class RawTransactionFields(BaseModel):
    model_config = ConfigDict(frozen=True)

    bank_name: str
    amount_text: str
    direction_text: str
    direction: TransactionDirection
    merchant_text: str = ""
    date_text: str = ""
    account_suffix: Optional[str] = None


class Category(BaseModel):
    id: int
    name: str
    icon: str = "label"
    color: str = "#9E9E9E"
    is_default: bool = False
    parent_category_id: Optional[int] = None


class Transaction(BaseModel):
    amount: Decimal
    type: TransactionType
    merchant: str
    date: datetime
    source: TransactionSource = TransactionSource.MANUAL
    description: Optional[str] = None
    category_id: Optional[int] = None
    account_id: Optional[int] = None
    transfer_account_id: Optional[int] = None
    transfer_transaction_id: Optional[int] = None
    id: Optional[int] = None


class MerchantProfile(BaseModel):
    name: str
    normalized_name: str
    category_id: Optional[int] = None
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    observation_count: int = Field(default=0, ge=0)


class CategorizationResult(BaseModel):
    category: Category
    confidence: float = Field(ge=0.0, le=1.0) # 0.0 to 1.0
    reason: ReasonKind
    features: list[str] = Field(default_factory=list)
