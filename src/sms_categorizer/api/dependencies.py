from fastapi import HTTPException, Request

from sms_categorizer.manager import CategorizerService
from sms_categorizer.services.ingestion import SmsIngestionPipeline
from sms_categorizer.sms.templates import TemplateRegistry


def get_service(request: Request) -> CategorizerService:
    service = getattr(request.app.state, "service", None)
    if not service:
        raise HTTPException(status_code=500, detail="Service not initialized")
    return service


def get_pipeline(request: Request) -> SmsIngestionPipeline:
    pipeline = getattr(request.app.state, "pipeline", None)
    if not pipeline:
        raise HTTPException(status_code=500, detail="Service not initialized")
    return pipeline


def get_registry(request: Request) -> TemplateRegistry:
    registry = getattr(request.app.state, "registry", None)
    if registry is None:
        raise HTTPException(status_code=500, detail="Templates not loaded")
    return registry
