from fastapi import APIRouter, Depends
import logging

from ..dependencies import get_fallback_manager
from ..features import ExcerptFeature, ImproveContentFeature, SEOFeature, TitleFeature
from ..models.ai import (
    ErrorResponse,
    ExcerptRequest,
    ExcerptResponse,
    ImproveContentRequest,
    ImproveContentResponse,
    SEORequest,
    SEOResponse,
    TitleRequest,
    TitleResponse,
)
from ..monitoring.metrics import track_metrics
from ..orchestration import FallbackManager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/ai", tags=["ai"])

# Features are stateless; one instance each
title_feature = TitleFeature()
content_feature = ImproveContentFeature()
seo_feature = SEOFeature()
excerpt_feature = ExcerptFeature()

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
}


@router.post("/generate-title", response_model=TitleResponse, responses=ERROR_RESPONSES)
@track_metrics("/generate-title")
async def generate_title(
    request: TitleRequest,
    manager: FallbackManager = Depends(get_fallback_manager),
):
    """Generate an SEO-friendly title for a blog post"""
    response, model = await manager.generate(title_feature, request)
    logger.info(f"Generated title with {model}")
    return response


@router.post("/improve-content", response_model=ImproveContentResponse, responses=ERROR_RESPONSES)
@track_metrics("/improve-content")
async def improve_content(
    request: ImproveContentRequest,
    manager: FallbackManager = Depends(get_fallback_manager),
):
    """Rewrite content: improve, rephrase, shorten, expand or fix grammar"""
    response, model = await manager.generate(content_feature, request)
    logger.info(f"Rewrote content ({request.action}) with {model}")
    return response


@router.post("/seo-suggestions", response_model=SEOResponse, responses=ERROR_RESPONSES)
@track_metrics("/seo-suggestions")
async def seo_suggestions(
    request: SEORequest,
    manager: FallbackManager = Depends(get_fallback_manager),
):
    """Score title, description and keywords and suggest improvements"""
    response, model = await manager.generate(seo_feature, request)
    logger.info(f"Generated SEO suggestions with {model}")
    return response


@router.post("/generate-excerpt", response_model=ExcerptResponse, responses=ERROR_RESPONSES)
@track_metrics("/generate-excerpt")
async def generate_excerpt(
    request: ExcerptRequest,
    manager: FallbackManager = Depends(get_fallback_manager),
):
    """Generate a short excerpt for a blog post"""
    response, model = await manager.generate(excerpt_feature, request)
    logger.info(f"Generated excerpt with {model}")
    return response
