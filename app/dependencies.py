"""FastAPI dependencies: authentication and the shared pipeline components."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.agents.concept_generator import ConceptGeneratorAgent
from app.agents.direction_finalizer import DirectionFinalizerAgent
from app.agents.product_analyst import ProductAnalystAgent
from app.agents.prompt_composer import PromptComposerAgent
from app.agents.style_extractor import StyleExtractorAgent
from app.config import settings
from app.core.database import async_session_maker
from app.core.exceptions import AuthenticationError
from app.core.security import verify_access_token
from app.integrations.image_model import GeminiImageClient
from app.services.asset_synthesizer import AssetSynthesizer
from app.services.credit_ledger import CreditLedger, InMemoryCreditLedger, SqlCreditLedger
from app.services.pipeline_orchestrator import PipelineOrchestrator
from app.services.task_manager import TaskManager

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_account_id(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> str:
    """Resolve the bearer token to an account id, or fail with 401."""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Not authenticated")
    return verify_access_token(credentials.credentials)


CurrentAccount = Annotated[str, Depends(get_current_account_id)]


@lru_cache
def get_credit_ledger() -> CreditLedger:
    """Process-wide ledger so per-account guards are shared across requests."""
    if settings.credit_ledger_backend == "memory":
        logger.info("Using in-memory credit ledger")
        return InMemoryCreditLedger()
    return SqlCreditLedger(async_session_maker)


@lru_cache
def get_orchestrator() -> PipelineOrchestrator:
    return PipelineOrchestrator(
        analyst=ProductAnalystAgent(),
        concept_generator=ConceptGeneratorAgent(),
        direction_finalizer=DirectionFinalizerAgent(),
        prompt_composer=PromptComposerAgent(),
        style_extractor=StyleExtractorAgent(),
        synthesizer=AssetSynthesizer(GeminiImageClient()),
        ledger=get_credit_ledger(),
    )


def get_task_manager() -> TaskManager:
    return TaskManager()


Ledger = Annotated[CreditLedger, Depends(get_credit_ledger)]
Orchestrator = Annotated[PipelineOrchestrator, Depends(get_orchestrator)]
Tasks = Annotated[TaskManager, Depends(get_task_manager)]
