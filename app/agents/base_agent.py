"""Base class for Pydantic AI agents."""

import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Generic, TypeVar, cast

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from pydantic_ai import Agent, BinaryContent
from pydantic_ai.exceptions import AgentRunError, ModelHTTPError, UnexpectedModelBehavior

from app.config import settings
from app.core.exceptions import ModelInvocationError, ParseError

logger = logging.getLogger(__name__)

InputT = TypeVar("InputT", bound=BaseModel)
OutputT = TypeVar("OutputT", bound=BaseModel)


class BaseAgent(ABC, Generic[InputT, OutputT]):
    """Abstract base class for Pydantic AI agents.

    Each agent should:
    1. Define the system_prompt property
    2. Define the output_type property
    3. Implement _build_prompt to construct the user prompt
    4. Optionally override _build_attachments to send images alongside the prompt
    5. Optionally override _postprocess to validate or normalize the output
    """

    # Model tier for environment-aware resolution (reasoning / standard / fast)
    model_tier: str = "standard"
    # Explicit model override at the class level (bypasses tier resolution)
    model: str | None = None
    temperature: float = 0.7
    max_retries: int = settings.llm_max_retries

    def __init__(self, model_override: str | None = None) -> None:
        """Initialize the agent.

        Model resolution priority:
        1. model_override parameter (explicit runtime override)
        2. model class attribute (if set by subclass)
        3. settings.get_model(self.model_tier) (environment-aware tier fallback)
        """
        model_source = "tier_default"
        if model_override:
            self._model = model_override
            model_source = "runtime_override"
        elif self.model:
            self._model = self.model
            model_source = "class_override"
        else:
            self._model = settings.get_model(self.model_tier)
        self._agent: Agent[None, OutputT] | None = None

        logger.info(
            "Agent initialized",
            extra={
                "agent": self.__class__.__name__,
                "model": self._model,
                "model_tier": self.model_tier,
                "model_source": model_source,
                "temperature": self.temperature,
            },
        )

    @property
    def model_name(self) -> str:
        """Resolved model identifier."""
        return self._model

    @property
    def agent(self) -> Agent[None, OutputT]:
        """Lazily initialize and return the Pydantic AI agent."""
        if self._agent is None:
            self._agent = cast(
                Agent[None, OutputT],
                Agent(
                    model=self._model,
                    output_type=self.output_type,
                    system_prompt=self.system_prompt,
                    retries=self.max_retries,
                    model_settings={
                        "temperature": self.temperature,
                        "timeout": settings.get_llm_timeout(self.model_tier),
                    },
                ),
            )
        agent = self._agent
        assert agent is not None
        return agent

    @property
    @abstractmethod
    def system_prompt(self) -> str:
        """System prompt for the agent."""
        pass

    @property
    @abstractmethod
    def output_type(self) -> type[OutputT]:
        """Pydantic model type for structured output."""
        pass

    async def run(
        self,
        input_data: InputT,
        context: dict[str, Any] | None = None,
    ) -> OutputT:
        """Run the agent with input data.

        Args:
            input_data: Pydantic model with input parameters.
            context: Optional context dict merged into log records.

        Returns:
            Structured output as defined by output_type.

        Raises:
            ModelInvocationError: The remote call failed.
            ParseError: The remote answer could not be decoded into output_type.
        """
        agent_name = self.__class__.__name__
        log_context = {"agent": agent_name, "model": self._model, **(context or {})}
        logger.info(
            "Agent run started",
            extra={**log_context, "input_type": type(input_data).__name__},
        )

        prompt = self._build_prompt(input_data)
        attachments = self._build_attachments(input_data)
        logger.info(
            "Prompt built, sending to LLM",
            extra={
                **log_context,
                "prompt_length": len(prompt),
                "attachments": len(attachments),
            },
        )

        user_prompt: str | list[str | BinaryContent] = (
            [prompt, *attachments] if attachments else prompt
        )

        t0 = time.perf_counter()
        try:
            result = await self.agent.run(user_prompt)
        except UnexpectedModelBehavior as exc:
            logger.warning("Agent output could not be parsed", extra={**log_context, "error": str(exc)})
            raise ParseError(
                f"{agent_name} returned an unparseable response",
                {"agent": agent_name, "error": str(exc)},
            ) from exc
        except (ModelHTTPError, AgentRunError) as exc:
            logger.warning("Agent run failed", extra={**log_context, "error": str(exc)})
            raise ModelInvocationError(
                f"{agent_name} model call failed",
                {"agent": agent_name, "error": str(exc)},
            ) from exc
        except (OSError, TimeoutError) as exc:
            logger.warning("Agent transport failed", extra={**log_context, "error": str(exc)})
            raise ModelInvocationError(
                f"{agent_name} model call failed",
                {"agent": agent_name, "error": str(exc)},
            ) from exc
        elapsed = time.perf_counter() - t0

        usage = result.usage()
        logger.info(
            "Agent run completed",
            extra={
                **log_context,
                "duration_s": round(elapsed, 2),
                "request_tokens": getattr(usage, "request_tokens", None),
                "response_tokens": getattr(usage, "response_tokens", None),
                "total_tokens": getattr(usage, "total_tokens", None),
                "output_type": type(result.output).__name__,
            },
        )

        try:
            return self._postprocess(result.output, input_data)
        except PydanticValidationError as exc:
            raise ParseError(
                f"{agent_name} returned an invalid payload",
                {"agent": agent_name, "error": str(exc)},
            ) from exc

    @abstractmethod
    def _build_prompt(self, input_data: InputT) -> str:
        """Build the user prompt from input data.

        Args:
            input_data: Input data for the agent.

        Returns:
            User prompt string.
        """
        pass

    def _build_attachments(self, input_data: InputT) -> list[BinaryContent]:
        """Return binary parts (images) sent after the prompt text."""
        return []

    def _postprocess(self, output: OutputT, input_data: InputT) -> OutputT:
        """Validate or normalize the decoded output. Raise ParseError to reject it."""
        return output
