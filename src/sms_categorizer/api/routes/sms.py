from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends

from sms_categorizer.api.dependencies import get_pipeline, get_registry
from sms_categorizer.api.schemas import SmsRequest, SmsResponse
from sms_categorizer.logger import get_logger
from sms_categorizer.models import SmsMessage, SmsTemplate
from sms_categorizer.services.ingestion import SmsIngestionPipeline
from sms_categorizer.sms.templates import TemplateRegistry

logger = get_logger(__name__)

router = APIRouter()


@router.post("/sms", response_model=SmsResponse, response_model_exclude_none=True)
async def ingest_sms(
    req: SmsRequest,
    pipeline: Annotated[SmsIngestionPipeline, Depends(get_pipeline)],
) -> SmsResponse:
    message = SmsMessage(
        sender=req.sender,
        body=req.body,
        received_at=req.received_at or datetime.now(),
    )
    logger.info("[SMS] Message received from %s.", message.sender)

    processed = await pipeline.process(message)
    if processed is None:
        return SmsResponse(status="ignored", reason="no matching template")

    return SmsResponse(
        status="processed",
        fields=processed.fields,
        transaction=processed.transaction,
        result=processed.result,
    )


@router.get("/templates", response_model=list[SmsTemplate])
async def list_templates(
    registry: Annotated[TemplateRegistry, Depends(get_registry)],
    active_only: bool = False,
) -> list[SmsTemplate]:
    if active_only:
        return registry.active_templates()
    return registry.all()
