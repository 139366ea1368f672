import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from sms_categorizer.api.routes import categorize, sms
from sms_categorizer.core import settings
from sms_categorizer.logger import get_logger, setup_logging
from sms_categorizer.manager import CategorizerService
from sms_categorizer.services.accounts import AccountDirectory
from sms_categorizer.services.ingestion import SmsIngestionPipeline
from sms_categorizer.sms.matcher import PatternMatcher
from sms_categorizer.sms.templates import TemplateRegistry

logger = get_logger(__name__)


def build_service() -> CategorizerService:
    options = {
        "keyword_confidence": settings.get_env_float(
            "KEYWORD_CONFIDENCE", settings.DEFAULT_KEYWORD_CONFIDENCE, min_value=0.0, max_value=1.0
        ),
        "user_keyword_confidence": settings.get_env_float(
            "USER_KEYWORD_CONFIDENCE", settings.DEFAULT_USER_KEYWORD_CONFIDENCE, min_value=0.0, max_value=1.0
        ),
    }
    if settings.get_store_backend() == "memory":
        logger.info("STORE_BACKEND=memory: learned merchants will not survive a restart.")
        return CategorizerService(**options)
    return CategorizerService.from_data_dir(settings.DATA_DIR, **options)


def build_pipeline(service: CategorizerService, registry: TemplateRegistry) -> SmsIngestionPipeline:
    matcher = PatternMatcher(registry, infer_direction=settings.get_env_bool("INFER_DIRECTION", True))
    accounts = AccountDirectory(
        default_account_id=settings.get_env_int("DEFAULT_ACCOUNT_ID", settings.DEFAULT_ACCOUNT_ID, min_value=1)
    )
    return SmsIngestionPipeline(service=service, matcher=matcher, accounts=accounts)


def create_app() -> FastAPI:
    setup_logging()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        logger.info("Initializing services...")
        settings.log_environment()

        templates_file = os.getenv("SMS_TEMPLATES_FILE")
        if not templates_file:
            logger.info("SMS_TEMPLATES_FILE not set. Using built-in bank templates.")

        service = build_service()
        registry = TemplateRegistry.load(templates_file)
        pipeline = build_pipeline(service, registry)

        app.state.service = service
        app.state.registry = registry
        app.state.pipeline = pipeline

        logger.info("Services initialized with %d SMS templates.", len(registry))
        yield
        logger.info("Service shutting down.")

    app = FastAPI(title="SMS Categorizer", lifespan=lifespan)

    app.include_router(sms.router)
    app.include_router(categorize.router)

    return app


app = create_app()
