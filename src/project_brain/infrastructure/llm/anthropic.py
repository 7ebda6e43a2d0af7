"""Anthropic chat completion adapter."""

from typing import Any

import anthropic

from project_brain.core.base import AIServiceErrorDetails, ErrorCode
from project_brain.core.circuit_breaker import CircuitBreaker
from project_brain.core.errors import ProviderError, ServiceError, ValidationError, is_transient
from project_brain.core.logging import get_logger

logger = get_logger(__name__)


class AnthropicLanguageModel:
    """Single-turn answers from Claude through ``anthropic.AsyncAnthropic``."""

    def __init__(
        self,
        api_key: str,
        default_model: str,
        max_tokens: int = 2000,
        client: Any | None = None,
        circuit_breaker: CircuitBreaker | None = None,
    ) -> None:
        if client is None and not api_key:
            raise ValidationError(
                "Anthropic API key not configured",
                details={
                    "source": "AnthropicLanguageModel",
                    "operation": "initialization",
                    "field": "anthropic_api_key",
                },
            )
        self.default_model = default_model
        self.max_tokens = max_tokens
        self.client = client or anthropic.AsyncAnthropic(api_key=api_key)
        self._circuit_breaker = circuit_breaker or CircuitBreaker(
            name="anthropic_api",
            failure_threshold=3,
            recovery_timeout=30.0,
            expected_exception_types=(ProviderError,),
            failure_predicate=is_transient,
        )

    async def complete(self, system: str, prompt: str, model: str | None = None) -> str:
        """Ask ``prompt`` under the ``system`` instructions and return the text answer.

        Raises:
            ProviderError: If the call fails, the answer is empty, or the circuit is open
        """
        model_id = model or self.default_model
        try:
            return await self._circuit_breaker.call_async(self._call_api, system, prompt, model_id)
        except ServiceError as e:
            raise ProviderError(
                e.message,
                details=self._details(model_id, status_code=503),
                code=ErrorCode.CIRCUIT_OPEN,
            ) from e

    async def _call_api(self, system: str, prompt: str, model_id: str) -> str:
        try:
            resp = await self.client.messages.create(
                model=model_id,
                max_tokens=self.max_tokens,
                system=system,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.APIStatusError as e:
            raise ProviderError(
                f"Anthropic API error: {e.message}",
                details=self._details(model_id, status_code=e.status_code),
                code=ErrorCode.RATE_LIMITED if e.status_code == 429 else ErrorCode.MODEL_ERROR,
                transient=e.status_code == 429 or e.status_code >= 500,
            ) from e
        except anthropic.APIError as e:
            raise ProviderError(
                f"Anthropic request failed: {e!s}",
                details=self._details(model_id),
                code=ErrorCode.MODEL_ERROR,
                transient=True,
            ) from e

        text_parts = [getattr(b, "text", "") for b in resp.content or [] if getattr(b, "type", None) == "text"]
        content = "\n".join(t for t in text_parts if t).strip()
        if not content:
            raise ProviderError(
                "Anthropic returned an empty answer",
                details=self._details(model_id, status_code=200),
                code=ErrorCode.MODEL_ERROR,
            )

        usage = getattr(resp, "usage", None)
        logger.debug(
            "Anthropic completion",
            model=model_id,
            input_tokens=getattr(usage, "input_tokens", None),
            output_tokens=getattr(usage, "output_tokens", None),
        )
        return content

    def _details(self, model_id: str, status_code: int | None = None) -> AIServiceErrorDetails:
        return AIServiceErrorDetails(
            source="AnthropicLanguageModel",
            operation="complete",
            service_name="Anthropic",
            endpoint="/v1/messages",
            status_code=status_code,
            provider_model=model_id,
            max_tokens=self.max_tokens,
        )
