import asyncio
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from sms_categorizer.api.dependencies import get_service
from sms_categorizer.api.schemas import (
    CategorizeRequest,
    KeywordRequest,
    LearnRequest,
    LearnResponse,
    SuggestRequest,
)
from sms_categorizer.errors import LearningPersistenceError, StoreUnavailableError
from sms_categorizer.logger import get_logger
from sms_categorizer.manager import CategorizerService
from sms_categorizer.models import CategorizationResult, Category

logger = get_logger(__name__)

router = APIRouter()


def _require_category(service: CategorizerService, category_id: int) -> Category:
    category = service.get_category(category_id)
    if category is None:
        raise HTTPException(status_code=404, detail=f"Unknown category id {category_id}")
    return category


@router.post("/categorize", response_model=CategorizationResult)
async def categorize_merchant(
    req: CategorizeRequest,
    service: Annotated[CategorizerService, Depends(get_service)],
) -> CategorizationResult:
    categories = None
    if req.category_ids is not None:
        wanted = set(req.category_ids)
        categories = [c for c in service.get_categories() if c.id in wanted]
    return await asyncio.to_thread(service.categorize, req.merchant, categories)


@router.post("/suggest", response_model=list[CategorizationResult])
async def suggest_categories(
    req: SuggestRequest,
    service: Annotated[CategorizerService, Depends(get_service)],
) -> list[CategorizationResult]:
    return await asyncio.to_thread(service.suggest_categories, req.merchant, req.limit)


@router.post("/learn", response_model=LearnResponse)
async def learn_category(
    req: LearnRequest,
    service: Annotated[CategorizerService, Depends(get_service)],
) -> LearnResponse:
    category = _require_category(service, req.category_id)
    try:
        profile = await asyncio.to_thread(service.learn_from_user_input, req.merchant, category)
    except LearningPersistenceError as exc:
        logger.error("[LEARN] Persisting correction for '%s' failed; client should retry.", req.merchant)
        raise HTTPException(status_code=503, detail="Learning not persisted; retry later") from exc

    if profile is None:
        raise HTTPException(status_code=400, detail="Merchant name is empty or unknown; nothing learned")

    return LearnResponse(
        status="learned",
        normalized_name=profile.normalized_name,
        category_id=profile.category_id,
        confidence=profile.confidence,
        observation_count=profile.observation_count,
    )


@router.get("/categories", response_model=list[Category])
async def get_categories(
    service: Annotated[CategorizerService, Depends(get_service)],
) -> list[Category]:
    return service.get_categories()


@router.post("/keywords")
async def add_keyword(
    req: KeywordRequest,
    service: Annotated[CategorizerService, Depends(get_service)],
) -> dict[str, str]:
    category = _require_category(service, req.category_id)
    try:
        keyword = service.add_keyword_mapping(req.keyword, category)
    except StoreUnavailableError as exc:
        logger.error("[KEYWORD] Saving keyword '%s' failed: %s", req.keyword, exc)
        raise HTTPException(status_code=503, detail="Keyword not persisted; retry later") from exc
    if not keyword:
        raise HTTPException(status_code=400, detail="Keyword is empty after normalization")
    return {"status": "added", "keyword": keyword}


@router.delete("/keywords/{keyword}")
async def remove_keyword(
    keyword: str,
    service: Annotated[CategorizerService, Depends(get_service)],
) -> dict[str, str]:
    try:
        removed = service.remove_keyword_mapping(keyword)
    except StoreUnavailableError as exc:
        logger.error("[KEYWORD] Removing keyword '%s' failed: %s", keyword, exc)
        raise HTTPException(status_code=503, detail="Keyword removal not persisted; retry later") from exc
    if not removed:
        raise HTTPException(status_code=404, detail=f"Unknown keyword '{keyword}'")
    return {"status": "removed", "keyword": keyword}
