"""Pipeline orchestrator: product input to generated, billed asset."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum

from app.agents.concept_generator import ConceptGeneratorAgent, ConceptGeneratorInput
from app.agents.direction_finalizer import DirectionFinalizerAgent, DirectionFinalizerInput
from app.agents.product_analyst import ProductAnalystAgent, ProductAnalystInput
from app.agents.prompt_composer import PromptComposerAgent, compose_style_transfer_prompt
from app.agents.style_extractor import StyleExtractorAgent, StyleExtractorInput
from app.core.exceptions import (
    CreditSettlementError,
    InputValidationError,
    InsufficientCreditsError,
    PipelineStateError,
    ShotCraftError,
)
from app.schemas.creative import AspectRatio, Concept, CreativeDirection, UserPreferences
from app.schemas.generation import GeneratedAsset, ProgressEvent, QualityTier, Resolution
from app.schemas.photography import ArtisticPrompt, PhotographerSpec
from app.schemas.product import ImagePayload, ProductAnalysis
from app.schemas.style import StyleAnalysis, StyleRefinements
from app.services.asset_synthesizer import AssetSynthesizer
from app.services.billing import TRANSACTION_IMAGE_GENERATION, resolve_required_credits
from app.services.credit_ledger import CreditLedger
from app.services.input_normalizer import normalize_product_input
from app.services.photography_rules import build_photographer_spec
from app.services.presets import PhotographyPreset, get_preset
from app.services.progress import ProgressChannel, TaskProgressMirror

logger = logging.getLogger(__name__)


class PipelineState(str, Enum):
    INTAKE = "intake"
    ANALYZED = "analyzed"
    CONCEPTS_READY = "concepts_ready"
    DIRECTION_FINALIZED = "direction_finalized"
    SPEC_COMPUTED = "spec_computed"
    PROMPT_COMPOSED = "prompt_composed"
    CREDIT_CHECKED = "credit_checked"
    ASSET_GENERATED = "asset_generated"
    SETTLED = "settled"
    FAILED = "failed"


FULL_PATH: tuple[PipelineState, ...] = (
    PipelineState.INTAKE,
    PipelineState.ANALYZED,
    PipelineState.CONCEPTS_READY,
    PipelineState.DIRECTION_FINALIZED,
    PipelineState.SPEC_COMPUTED,
    PipelineState.PROMPT_COMPOSED,
    PipelineState.CREDIT_CHECKED,
    PipelineState.ASSET_GENERATED,
    PipelineState.SETTLED,
)

STYLE_TRANSFER_PATH: tuple[PipelineState, ...] = (
    PipelineState.INTAKE,
    PipelineState.ANALYZED,
    PipelineState.PROMPT_COMPOSED,
    PipelineState.CREDIT_CHECKED,
    PipelineState.ASSET_GENERATED,
    PipelineState.SETTLED,
)

MODE_PATHS: dict[str, tuple[PipelineState, ...]] = {
    "full": FULL_PATH,
    "style_transfer": STYLE_TRANSFER_PATH,
}


class PipelineRun:
    """Forward-only state tracker for one invocation."""

    def __init__(self, mode: str, *, start_state: PipelineState = PipelineState.INTAKE) -> None:
        if mode not in MODE_PATHS:
            raise PipelineStateError(f"Unknown pipeline mode: {mode}", {"mode": mode})
        self.mode = mode
        self.path = MODE_PATHS[mode]
        if start_state not in self.path:
            raise PipelineStateError(
                f"{start_state.value} is not on the {mode} path",
                {"mode": mode, "state": start_state.value},
            )
        self.state = start_state
        self.history: list[PipelineState] = [start_state]
        self.last_reached = start_state

    @property
    def is_failed(self) -> bool:
        return self.state == PipelineState.FAILED

    def advance(self, target: PipelineState) -> None:
        if self.is_failed:
            raise PipelineStateError(
                "Cannot advance a failed run",
                {"mode": self.mode, "target": target.value},
            )
        index = self.path.index(self.state)
        if index + 1 >= len(self.path) or self.path[index + 1] != target:
            raise PipelineStateError(
                f"Illegal transition {self.state.value} -> {target.value}",
                {"mode": self.mode, "from": self.state.value, "to": target.value},
            )
        logger.info(
            "Pipeline state transition",
            extra={"mode": self.mode, "from": self.state.value, "to": target.value},
        )
        self.state = target
        self.last_reached = target
        self.history.append(target)

    def fail(self, exc: BaseException) -> None:
        """Mark the run failed and stamp the last good state onto the error."""
        if isinstance(exc, ShotCraftError):
            exc.details.setdefault("reached_state", self.last_reached.value)
        logger.warning(
            "Pipeline run failed",
            extra={
                "mode": self.mode,
                "reached_state": self.last_reached.value,
                "error_type": type(exc).__name__,
                "error": str(exc),
            },
        )
        self.state = PipelineState.FAILED
        self.history.append(PipelineState.FAILED)


@dataclass
class AnalysisResult:
    analysis: ProductAnalysis
    recommended_presets: list[PhotographyPreset]
    progress: list[ProgressEvent] = field(default_factory=list)


@dataclass
class ConceptsResult:
    analysis: ProductAnalysis
    concepts: list[Concept]
    progress: list[ProgressEvent] = field(default_factory=list)


@dataclass
class DirectionResult:
    direction: CreativeDirection
    photographer_spec: PhotographerSpec
    progress: list[ProgressEvent] = field(default_factory=list)


@dataclass
class SettlementOutcome:
    asset: GeneratedAsset
    credits_used: int
    new_balance: int | None
    settlement_error: str | None


@dataclass
class AssetGenerationResult:
    direction: CreativeDirection
    photographer_spec: PhotographerSpec
    prompt: ArtisticPrompt
    asset: GeneratedAsset
    credits_used: int
    new_balance: int | None
    settlement_error: str | None
    state: PipelineState
    progress: list[ProgressEvent] = field(default_factory=list)


@dataclass
class StyleTransferResult:
    style_analysis: StyleAnalysis
    prompt: ArtisticPrompt
    asset: GeneratedAsset
    credits_used: int
    new_balance: int | None
    settlement_error: str | None
    state: PipelineState
    progress: list[ProgressEvent] = field(default_factory=list)


class PipelineOrchestrator:
    """Drive the stages in order and own the credit gate.

    Concept generation is the cheap half and never touches the ledger or the
    synthesizer. Everything after concept selection is the billed half: the
    balance is checked before synthesis, and credits are deducted only after
    an asset exists.
    """

    def __init__(
        self,
        *,
        analyst: ProductAnalystAgent,
        concept_generator: ConceptGeneratorAgent,
        direction_finalizer: DirectionFinalizerAgent,
        prompt_composer: PromptComposerAgent,
        style_extractor: StyleExtractorAgent,
        synthesizer: AssetSynthesizer,
        ledger: CreditLedger,
    ) -> None:
        self.analyst = analyst
        self.concept_generator = concept_generator
        self.direction_finalizer = direction_finalizer
        self.prompt_composer = prompt_composer
        self.style_extractor = style_extractor
        self.synthesizer = synthesizer
        self.ledger = ledger

    async def analyze(
        self,
        image: ImagePayload | None,
        text: str | None,
        *,
        progress: ProgressChannel | None = None,
        task_mirror: TaskProgressMirror | None = None,
    ) -> AnalysisResult:
        """INTAKE -> ANALYZED."""
        channel = self._channel(progress, task_mirror)
        run = PipelineRun("full")
        try:
            analysis = await self._analyze(run, channel, image, text)
            await channel.emit("Analysis complete", 100)
        except Exception as exc:
            await self._fail(run, exc, task_mirror)
            raise

        presets = [
            preset
            for preset in (get_preset(preset_id) for preset_id in analysis.recommended_presets)
            if preset is not None
        ]
        return AnalysisResult(
            analysis=analysis,
            recommended_presets=presets,
            progress=channel.events,
        )

    async def generate_concepts(
        self,
        image: ImagePayload | None,
        text: str | None,
        *,
        analysis: ProductAnalysis | None = None,
        platform: str | None = None,
        preferences: UserPreferences | None = None,
        progress: ProgressChannel | None = None,
        task_mirror: TaskProgressMirror | None = None,
    ) -> ConceptsResult:
        """INTAKE -> CONCEPTS_READY. A supplied analysis is reused as-is."""
        channel = self._channel(progress, task_mirror)
        run = PipelineRun("full")
        try:
            if analysis is None:
                analysis = await self._analyze(run, channel, image, text)
            else:
                await channel.emit("Reusing product analysis", 30)
                run.advance(PipelineState.ANALYZED)

            await channel.emit("Generating creative concepts", 40)
            batch = await self.concept_generator.run(
                ConceptGeneratorInput(
                    analysis=analysis,
                    platform=platform,
                    preferences=preferences,
                ),
                context={"product_type": analysis.product_type},
            )
            run.advance(PipelineState.CONCEPTS_READY)
            await channel.emit("Concepts ready", 100)
        except Exception as exc:
            await self._fail(run, exc, task_mirror)
            raise

        return ConceptsResult(
            analysis=analysis,
            concepts=list(batch.concepts),
            progress=channel.events,
        )

    async def create_asset(
        self,
        *,
        account_id: str,
        analysis: ProductAnalysis,
        concept: Concept,
        product_image: ImagePayload | None,
        platform: str | None = None,
        preset_id: str | None = None,
        aspect_ratio: AspectRatio | None = None,
        quality_tier: QualityTier = "standard",
        resolution: Resolution = "1K",
        progress: ProgressChannel | None = None,
        task_mirror: TaskProgressMirror | None = None,
    ) -> AssetGenerationResult:
        """Resume at CONCEPTS_READY with the selected concept and run to SETTLED."""
        channel = self._channel(progress, task_mirror)
        run = PipelineRun("full", start_state=PipelineState.CONCEPTS_READY)
        try:
            direction, spec = await self._direct(
                run,
                channel,
                analysis=analysis,
                concept=concept,
                platform=platform,
                preset_id=preset_id,
                aspect_ratio=aspect_ratio,
            )

            await channel.emit("Composing prompt", 40)
            prompt = await self.prompt_composer.compose(analysis, direction, spec)
            run.advance(PipelineState.PROMPT_COMPOSED)

            outcome = await self._gate_generate_and_settle(
                run,
                channel,
                account_id=account_id,
                prompt=prompt,
                product_image=product_image,
                style_reference=None,
                aspect_ratio=direction.aspect_ratio,
                quality_tier=quality_tier,
                resolution=resolution,
            )
            await channel.emit("Complete", 100)
        except Exception as exc:
            await self._fail(run, exc, task_mirror)
            raise

        return AssetGenerationResult(
            direction=direction,
            photographer_spec=spec,
            prompt=prompt,
            asset=outcome.asset,
            credits_used=outcome.credits_used,
            new_balance=outcome.new_balance,
            settlement_error=outcome.settlement_error,
            state=run.state,
            progress=channel.events,
        )

    async def preview_direction(
        self,
        *,
        analysis: ProductAnalysis,
        concept: Concept,
        platform: str | None = None,
        preset_id: str | None = None,
        aspect_ratio: AspectRatio | None = None,
        progress: ProgressChannel | None = None,
    ) -> DirectionResult:
        """CONCEPTS_READY -> SPEC_COMPUTED. Free: no credit check, no synthesis."""
        channel = self._channel(progress, None)
        run = PipelineRun("full", start_state=PipelineState.CONCEPTS_READY)
        try:
            direction, spec = await self._direct(
                run,
                channel,
                analysis=analysis,
                concept=concept,
                platform=platform,
                preset_id=preset_id,
                aspect_ratio=aspect_ratio,
            )
            await channel.emit("Direction ready", 100)
        except Exception as exc:
            await self._fail(run, exc, None)
            raise

        return DirectionResult(direction=direction, photographer_spec=spec, progress=channel.events)

    async def analyze_style(
        self,
        reference_image: ImagePayload | None,
        notes: str | None = None,
    ) -> StyleAnalysis:
        if reference_image is None:
            raise InputValidationError(
                "A reference image is required",
                {"field": "reference_image"},
            )
        return await self.style_extractor.run(
            StyleExtractorInput(reference_image=reference_image, notes=notes)
        )

    async def generate_from_reference(
        self,
        *,
        account_id: str,
        product_image: ImagePayload | None,
        reference_image: ImagePayload | None,
        style_analysis: StyleAnalysis | None = None,
        refinements: StyleRefinements | None = None,
        notes: str | None = None,
        aspect_ratio: AspectRatio = "1:1",
        quality_tier: QualityTier = "standard",
        resolution: Resolution = "1K",
        progress: ProgressChannel | None = None,
        task_mirror: TaskProgressMirror | None = None,
    ) -> StyleTransferResult:
        """Style-transfer path: INTAKE -> ANALYZED -> PROMPT_COMPOSED -> ... -> SETTLED."""
        channel = self._channel(progress, task_mirror)
        run = PipelineRun("style_transfer")
        try:
            if product_image is None:
                raise InputValidationError(
                    "A product image is required",
                    {"field": "product_image"},
                )
            if reference_image is None:
                raise InputValidationError(
                    "A reference image is required",
                    {"field": "reference_image"},
                )
            if style_analysis is None:
                await channel.emit("Analyzing reference style", 10)
                style_analysis = await self.analyze_style(reference_image, notes)
            else:
                await channel.emit("Reusing reference style", 10)
            run.advance(PipelineState.ANALYZED)

            await channel.emit("Composing prompt", 30)
            prompt = compose_style_transfer_prompt(
                style_analysis,
                refinements or StyleRefinements(),
                notes,
            )
            run.advance(PipelineState.PROMPT_COMPOSED)

            outcome = await self._gate_generate_and_settle(
                run,
                channel,
                account_id=account_id,
                prompt=prompt,
                product_image=product_image,
                style_reference=reference_image,
                aspect_ratio=aspect_ratio,
                quality_tier=quality_tier,
                resolution=resolution,
            )
            await channel.emit("Complete", 100)
        except Exception as exc:
            await self._fail(run, exc, task_mirror)
            raise

        return StyleTransferResult(
            style_analysis=style_analysis,
            prompt=prompt,
            asset=outcome.asset,
            credits_used=outcome.credits_used,
            new_balance=outcome.new_balance,
            settlement_error=outcome.settlement_error,
            state=run.state,
            progress=channel.events,
        )

    async def _analyze(
        self,
        run: PipelineRun,
        channel: ProgressChannel,
        image: ImagePayload | None,
        text: str | None,
    ) -> ProductAnalysis:
        product = normalize_product_input(image, text)
        await channel.emit("Analyzing product", 10)
        analysis = await self.analyst.run(ProductAnalystInput(product=product))
        run.advance(PipelineState.ANALYZED)
        await channel.emit("Product analyzed", 30)
        return analysis

    async def _direct(
        self,
        run: PipelineRun,
        channel: ProgressChannel,
        *,
        analysis: ProductAnalysis,
        concept: Concept,
        platform: str | None,
        preset_id: str | None,
        aspect_ratio: AspectRatio | None,
    ) -> tuple[CreativeDirection, PhotographerSpec]:
        await channel.emit("Finalizing creative direction", 10)
        direction = await self.direction_finalizer.finalize(
            DirectionFinalizerInput(
                concept=concept,
                analysis=analysis,
                platform=platform,
                preset_id=preset_id,
            )
        )
        if aspect_ratio is not None:
            direction = direction.model_copy(update={"aspect_ratio": aspect_ratio})
        run.advance(PipelineState.DIRECTION_FINALIZED)

        await channel.emit("Computing photography spec", 30)
        spec = build_photographer_spec(direction)
        run.advance(PipelineState.SPEC_COMPUTED)
        return direction, spec

    async def _gate_generate_and_settle(
        self,
        run: PipelineRun,
        channel: ProgressChannel,
        *,
        account_id: str,
        prompt: ArtisticPrompt,
        product_image: ImagePayload | None,
        style_reference: ImagePayload | None,
        aspect_ratio: str | None,
        quality_tier: QualityTier,
        resolution: Resolution,
    ) -> SettlementOutcome:
        required = resolve_required_credits(quality_tier, resolution)
        # The account guard is held inside the shielded unit, from balance check
        # through deduction.
        return await asyncio.shield(
            self._guarded_generate(
                run,
                channel,
                account_id=account_id,
                required=required,
                prompt=prompt,
                product_image=product_image,
                style_reference=style_reference,
                aspect_ratio=aspect_ratio,
                quality_tier=quality_tier,
                resolution=resolution,
            )
        )

    async def _guarded_generate(
        self,
        run: PipelineRun,
        channel: ProgressChannel,
        *,
        account_id: str,
        required: int,
        prompt: ArtisticPrompt,
        product_image: ImagePayload | None,
        style_reference: ImagePayload | None,
        aspect_ratio: str | None,
        quality_tier: QualityTier,
        resolution: Resolution,
    ) -> SettlementOutcome:
        async with self.ledger.account_guard(account_id):
            await channel.emit("Checking credits", 50)
            available = await self.ledger.get_balance(account_id)
            if available < required:
                logger.info(
                    "Credit gate rejected generation",
                    extra={"account_id": account_id, "required": required, "available": available},
                )
                raise InsufficientCreditsError(required=required, available=available)
            run.advance(PipelineState.CREDIT_CHECKED)

            return await self._synthesize_and_settle(
                run,
                channel,
                account_id=account_id,
                required=required,
                prompt=prompt,
                product_image=product_image,
                style_reference=style_reference,
                aspect_ratio=aspect_ratio,
                quality_tier=quality_tier,
                resolution=resolution,
            )

    async def _synthesize_and_settle(
        self,
        run: PipelineRun,
        channel: ProgressChannel,
        *,
        account_id: str,
        required: int,
        prompt: ArtisticPrompt,
        product_image: ImagePayload | None,
        style_reference: ImagePayload | None,
        aspect_ratio: str | None,
        quality_tier: QualityTier,
        resolution: Resolution,
    ) -> SettlementOutcome:
        await channel.emit("Generating image", 60)
        asset = await self.synthesizer.synthesize(
            prompt=prompt,
            product_image=product_image,
            style_reference=style_reference,
            aspect_ratio=aspect_ratio,
            quality_tier=quality_tier,
            resolution=resolution,
        )
        run.advance(PipelineState.ASSET_GENERATED)

        await channel.emit("Settling credits", 90)
        metadata = {
            "asset_id": asset.id,
            "mode": run.mode,
            "quality_tier": quality_tier,
            "resolution": resolution,
            "model": asset.model_name,
        }
        try:
            deduction = await self.ledger.deduct(
                account_id,
                required,
                TRANSACTION_IMAGE_GENERATION,
                metadata,
            )
            if not deduction.success:
                raise CreditSettlementError(
                    deduction.error or "Credit deduction failed",
                    {"account_id": account_id, "required": required, "asset_id": asset.id},
                )
        except Exception as exc:
            settlement_error = (
                exc
                if isinstance(exc, CreditSettlementError)
                else CreditSettlementError(
                    f"Credit deduction failed: {exc}",
                    {"account_id": account_id, "required": required, "asset_id": asset.id},
                )
            )
            logger.error(
                "Credit settlement failed after generation",
                extra={
                    "account_id": account_id,
                    "asset_id": asset.id,
                    "required": required,
                    "error": settlement_error.message,
                },
            )
            return SettlementOutcome(
                asset=asset,
                credits_used=0,
                new_balance=None,
                settlement_error=settlement_error.message,
            )

        run.advance(PipelineState.SETTLED)
        logger.info(
            "Generation settled",
            extra={
                "account_id": account_id,
                "asset_id": asset.id,
                "credits_used": required,
                "new_balance": deduction.new_balance,
            },
        )
        return SettlementOutcome(
            asset=asset,
            credits_used=required,
            new_balance=deduction.new_balance,
            settlement_error=None,
        )

    @staticmethod
    def _channel(
        progress: ProgressChannel | None,
        task_mirror: TaskProgressMirror | None,
    ) -> ProgressChannel:
        channel = progress or ProgressChannel()
        if task_mirror is not None:
            channel.subscribe(task_mirror)
        return channel

    @staticmethod
    async def _fail(
        run: PipelineRun,
        exc: BaseException,
        task_mirror: TaskProgressMirror | None,
    ) -> None:
        run.fail(exc)
        if task_mirror is not None:
            await task_mirror.mark_failed(run.last_reached.value, str(exc))
