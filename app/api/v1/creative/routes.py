"""Creative generation API endpoints."""

from __future__ import annotations

import base64
import logging

from fastapi import APIRouter, HTTPException, status

from app.api.v1.creative.constants import (
    PIPELINE_MODE_FULL,
    PIPELINE_MODE_STYLE_TRANSFER,
    TASK_OWNED_BY_OTHER_ACCOUNT_DETAIL,
)
from app.dependencies import CurrentAccount, Orchestrator, Tasks
from app.schemas.generation import (
    AnalyzeRequest,
    AnalyzeResponse,
    ConceptsRequest,
    ConceptsResponse,
    DirectionRequest,
    DirectionResponse,
    GeneratedAsset,
    GeneratedAssetResponse,
    OrchestrateRequest,
    OrchestrateResponse,
    PresetSummary,
    ReferenceAnalyzeRequest,
    ReferenceAnalyzeResponse,
    ReferenceGenerateRequest,
    ReferenceGenerateResponse,
)
from app.services.input_normalizer import decode_image_upload
from app.services.progress import TaskProgressMirror
from app.services.task_manager import TaskManager

logger = logging.getLogger(__name__)

router = APIRouter()


def _asset_response(asset: GeneratedAsset) -> GeneratedAssetResponse:
    return GeneratedAssetResponse(
        id=asset.id,
        image_base64=base64.b64encode(asset.image.data).decode("ascii"),
        mime_type=asset.image.mime_type,
        prompt=asset.prompt,
        model_name=asset.model_name,
        credit_cost=asset.credit_cost,
        quality_tier=asset.quality_tier,
        resolution=asset.resolution,
        aspect_ratio=asset.aspect_ratio,
    )


async def _task_mirror(
    task_id: str | None,
    *,
    account_id: str,
    pipeline_mode: str,
    task_manager: TaskManager,
) -> TaskProgressMirror | None:
    if not task_id:
        return None
    if await task_manager.is_claimed_by_other(task_id, account_id):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=TASK_OWNED_BY_OTHER_ACCOUNT_DETAIL,
        )
    return TaskProgressMirror(
        task_id,
        account_id=account_id,
        pipeline_mode=pipeline_mode,
        task_manager=task_manager,
    )


@router.post("/analyze", response_model=AnalyzeResponse)
async def analyze_product(
    request: AnalyzeRequest,
    account_id: CurrentAccount,
    orchestrator: Orchestrator,
) -> AnalyzeResponse:
    """Analyze a product from an image, a description, or both."""
    image = decode_image_upload(request.image)
    result = await orchestrator.analyze(image, request.text)
    logger.info(
        "Product analyzed",
        extra={"account_id": account_id, "product_type": result.analysis.product_type},
    )
    return AnalyzeResponse(
        analysis=result.analysis,
        recommended_presets=[
            PresetSummary(
                id=preset.id,
                name=preset.name,
                description=preset.mood,
                best_for=list(preset.best_for),
            )
            for preset in result.recommended_presets
        ],
        progress=result.progress,
    )


@router.post("/concepts", response_model=ConceptsResponse)
async def generate_concepts(
    request: ConceptsRequest,
    account_id: CurrentAccount,
    orchestrator: Orchestrator,
) -> ConceptsResponse:
    """Propose creative concepts. Never charges credits."""
    image = decode_image_upload(request.image) if request.analysis is None else None
    result = await orchestrator.generate_concepts(
        image,
        request.text,
        analysis=request.analysis,
        platform=request.platform,
        preferences=request.preferences,
    )
    logger.info(
        "Concepts generated",
        extra={"account_id": account_id, "concepts": len(result.concepts)},
    )
    return ConceptsResponse(
        analysis=result.analysis,
        concepts=result.concepts,
        progress=result.progress,
    )


@router.post("/direction", response_model=DirectionResponse)
async def preview_direction(
    request: DirectionRequest,
    account_id: CurrentAccount,
    orchestrator: Orchestrator,
) -> DirectionResponse:
    """Finalize direction and compute the photography spec. Never charges credits."""
    result = await orchestrator.preview_direction(
        analysis=request.analysis,
        concept=request.concept,
        platform=request.platform,
        preset_id=request.preset_id,
        aspect_ratio=request.aspect_ratio,
    )
    logger.info(
        "Direction previewed",
        extra={"account_id": account_id, "concept_id": request.concept.id},
    )
    return DirectionResponse(
        direction=result.direction,
        photographer_spec=result.photographer_spec,
        progress=result.progress,
    )


@router.post("/orchestrate", response_model=OrchestrateResponse)
async def orchestrate_asset(
    request: OrchestrateRequest,
    account_id: CurrentAccount,
    orchestrator: Orchestrator,
    task_manager: Tasks,
) -> OrchestrateResponse:
    """Turn a selected concept into a generated, billed image."""
    image = decode_image_upload(request.image)
    task_mirror = await _task_mirror(
        request.task_id,
        account_id=account_id,
        pipeline_mode=PIPELINE_MODE_FULL,
        task_manager=task_manager,
    )
    result = await orchestrator.create_asset(
        account_id=account_id,
        analysis=request.analysis,
        concept=request.concept,
        product_image=image,
        platform=request.platform,
        preset_id=request.preset_id,
        aspect_ratio=request.aspect_ratio,
        quality_tier=request.quality_tier,
        resolution=request.resolution,
        task_mirror=task_mirror,
    )
    return OrchestrateResponse(
        direction=result.direction,
        photographer_spec=result.photographer_spec,
        prompt=result.prompt.text,
        asset=_asset_response(result.asset),
        credits_used=result.credits_used,
        new_balance=result.new_balance,
        settlement_error=result.settlement_error,
        progress=result.progress,
    )


@router.post("/reference/analyze", response_model=ReferenceAnalyzeResponse)
async def analyze_reference(
    request: ReferenceAnalyzeRequest,
    account_id: CurrentAccount,
    orchestrator: Orchestrator,
) -> ReferenceAnalyzeResponse:
    """Extract a reusable style from a reference image."""
    reference_image = decode_image_upload(request.reference_image, field="reference_image")
    style_analysis = await orchestrator.analyze_style(reference_image, request.notes)
    logger.info("Reference style extracted", extra={"account_id": account_id})
    return ReferenceAnalyzeResponse(style_analysis=style_analysis)


@router.post("/reference/generate", response_model=ReferenceGenerateResponse)
async def generate_from_reference(
    request: ReferenceGenerateRequest,
    account_id: CurrentAccount,
    orchestrator: Orchestrator,
    task_manager: Tasks,
) -> ReferenceGenerateResponse:
    """Render the product in the style of a reference image."""
    product_image = decode_image_upload(request.product_image, field="product_image")
    reference_image = decode_image_upload(request.reference_image, field="reference_image")
    task_mirror = await _task_mirror(
        request.task_id,
        account_id=account_id,
        pipeline_mode=PIPELINE_MODE_STYLE_TRANSFER,
        task_manager=task_manager,
    )
    result = await orchestrator.generate_from_reference(
        account_id=account_id,
        product_image=product_image,
        reference_image=reference_image,
        style_analysis=request.style_analysis,
        refinements=request.refinements,
        notes=request.notes,
        aspect_ratio=request.aspect_ratio,
        quality_tier=request.quality_tier,
        resolution=request.resolution,
        task_mirror=task_mirror,
    )
    return ReferenceGenerateResponse(
        style_analysis=result.style_analysis,
        prompt=result.prompt.text,
        asset=_asset_response(result.asset),
        credits_used=result.credits_used,
        new_balance=result.new_balance,
        settlement_error=result.settlement_error,
        progress=result.progress,
    )
