"""Structured-output model capability, its LangChain adapter, and the client cache.

The pipelines only see ``StructuredModel``: give it a prompt and an output
schema, get back an instance of that schema or an ``ExternalServiceError``.
Nothing outside this module imports a model vendor.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional, Protocol, TypeVar
import time

import structlog
from langchain_core.messages import HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI
from pydantic import BaseModel, ValidationError
from tenacity import AsyncRetrying, RetryError, stop_after_attempt, wait_exponential

from adcanvas.config import get_settings
from adcanvas.errors import ExternalServiceError

logger = structlog.get_logger()

T = TypeVar("T", bound=BaseModel)


class ModelMode(str, Enum):
    """Sampling regime requested by a call site."""

    DETERMINISTIC = "deterministic"  # classification, validation
    CREATIVE = "creative"            # design generation


@dataclass(frozen=True)
class ModelSpec:
    """Identifies one configured model client. Used as the cache key."""

    model_name: str
    temperature: float
    max_output_tokens: int = 4096

    @classmethod
    def for_mode(cls, mode: ModelMode, model_name: Optional[str] = None) -> "ModelSpec":
        settings = get_settings()
        if mode == ModelMode.CREATIVE:
            return cls(
                model_name=model_name or settings.CREATIVE_MODEL,
                temperature=settings.CREATIVE_TEMPERATURE,
                max_output_tokens=settings.MODEL_MAX_OUTPUT_TOKENS,
            )
        return cls(
            model_name=model_name or settings.VALIDATION_MODEL,
            temperature=settings.DETERMINISTIC_TEMPERATURE,
            max_output_tokens=settings.MODEL_MAX_OUTPUT_TOKENS,
        )


@dataclass(frozen=True)
class PromptSpec:
    """One structured-output request."""

    system: str
    user: str
    name: str = "model_call"


class StructuredModel(Protocol):
    async def invoke(self, prompt: PromptSpec, schema: type[T]) -> T:
        """Return an instance of ``schema`` or raise ``ExternalServiceError``."""
        ...


class LangChainStructuredModel:
    """``StructuredModel`` backed by a LangChain chat model with enforced output schema."""

    def __init__(self, spec: ModelSpec, max_attempts: Optional[int] = None):
        self.spec = spec
        self.max_attempts = max_attempts or get_settings().MODEL_MAX_ATTEMPTS
        self._llm = None
        self._bound: dict[type, Any] = {}

    @property
    def llm(self):
        """Lazy-initialize the chat client."""
        if self._llm is None:
            self._llm = self._create_llm()
        return self._llm

    def _create_llm(self):
        settings = get_settings()
        return ChatOpenAI(
            model=self.spec.model_name,
            api_key=settings.OPENAI_API_KEY,
            temperature=self.spec.temperature,
            max_tokens=self.spec.max_output_tokens,
        )

    def _structured(self, schema: type[T]):
        bound = self._bound.get(schema)
        if bound is None:
            bound = self._bound.setdefault(schema, self.llm.with_structured_output(schema))
        return bound

    async def invoke(self, prompt: PromptSpec, schema: type[T]) -> T:
        messages = [SystemMessage(content=prompt.system), HumanMessage(content=prompt.user)]
        start_time = time.time()

        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.max_attempts),
                wait=wait_exponential(multiplier=1, min=2, max=30),
                before_sleep=lambda retry_state: logger.warning(
                    "llm_retry",
                    call=prompt.name,
                    attempt=retry_state.attempt_number,
                    wait=retry_state.next_action.sleep,
                ),
            ):
                with attempt:
                    result = await self._structured(schema).ainvoke(messages)
        except RetryError as e:
            cause = e.last_attempt.exception()
            logger.error("llm_call_failed", call=prompt.name, model=self.spec.model_name, error=str(cause))
            raise ExternalServiceError(f"{prompt.name} failed: {cause}") from cause

        if isinstance(result, dict):
            try:
                result = schema.model_validate(result)
            except ValidationError as e:
                raise ExternalServiceError(f"{prompt.name} returned a non-conforming value: {e}") from e
        if not isinstance(result, schema):
            raise ExternalServiceError(f"{prompt.name} returned {type(result).__name__}, expected {schema.__name__}")

        logger.info(
            "llm_call_completed",
            call=prompt.name,
            model=self.spec.model_name,
            temperature=self.spec.temperature,
            duration_seconds=round(time.time() - start_time, 2),
        )
        return result


ModelFactory = Callable[[ModelSpec], StructuredModel]


class ModelRegistry:
    """Process-wide cache of model clients keyed by ``ModelSpec``.

    Populating the cache is idempotent, so concurrent first access at worst
    builds a client twice and keeps one.
    """

    def __init__(self, factory: Optional[ModelFactory] = None):
        self._factory = factory or LangChainStructuredModel
        self._clients: dict[ModelSpec, StructuredModel] = {}

    def get(self, spec: ModelSpec) -> StructuredModel:
        client = self._clients.get(spec)
        if client is None:
            client = self._clients.setdefault(spec, self._factory(spec))
        return client

    def for_mode(self, mode: ModelMode, model_name: Optional[str] = None) -> StructuredModel:
        return self.get(ModelSpec.for_mode(mode, model_name))

    def clear(self) -> None:
        self._clients.clear()

    def __len__(self) -> int:
        return len(self._clients)
