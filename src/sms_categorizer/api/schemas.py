from datetime import datetime

from pydantic import BaseModel, Field

from sms_categorizer.models import CategorizationResult, RawTransactionFields, Transaction


class SmsRequest(BaseModel):
    sender: str
    body: str
    received_at: datetime | None = None


class SmsResponse(BaseModel):
    status: str
    reason: str | None = None
    fields: RawTransactionFields | None = None
    transaction: Transaction | None = None
    result: CategorizationResult | None = None


class CategorizeRequest(BaseModel):
    merchant: str
    category_ids: list[int] | None = None


class SuggestRequest(BaseModel):
    merchant: str
    limit: int = Field(default=5, ge=1, le=20)


class LearnRequest(BaseModel):
    merchant: str
    category_id: int


class LearnResponse(BaseModel):
    status: str
    normalized_name: str
    category_id: int | None
    confidence: float
    observation_count: int


class KeywordRequest(BaseModel):
    keyword: str
    category_id: int
