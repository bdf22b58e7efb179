"""LLM completion client for AI-powered recommendations"""

import time
from typing import Optional

import anthropic

from ..config import settings
from ..exceptions import UpstreamUnavailable
from ..utils.logging import get_logger
from ..utils.metrics import llm_request_duration_seconds

logger = get_logger(__name__)


class AnthropicLLMClient:
    """
    Single-shot text completion over the Anthropic Messages API

    The client carries its own timeout and never retries: callers get one
    attempt and an UpstreamUnavailable on any provider, network or timeout
    failure.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
        timeout: Optional[float] = None,
        client: Optional[anthropic.Anthropic] = None
    ):
        self.model = model or settings.ANTHROPIC_MODEL
        self.max_tokens = max_tokens or settings.LLM_MAX_TOKENS
        self.timeout = timeout or settings.LLM_TIMEOUT_SECONDS

        api_key = api_key or settings.ANTHROPIC_API_KEY
        if client is not None:
            self.client = client
        elif api_key:
            self.client = anthropic.Anthropic(api_key=api_key, timeout=self.timeout, max_retries=0)
        else:
            logger.warning("ANTHROPIC_API_KEY is not configured, AI recommendations will use the fallback ranking")
            self.client = None

    @property
    def is_configured(self) -> bool:
        return self.client is not None

    def complete(self, system_prompt: str, user_message: str) -> str:
        """
        Run one completion and return the first text block

        Raises:
            UpstreamUnavailable: not configured, timed out, provider or
                network error, or no text in the response
        """

        if self.client is None:
            raise UpstreamUnavailable("not_configured", "ANTHROPIC_API_KEY not configured")

        start_time = time.time()
        try:
            response = self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                system=system_prompt,
                messages=[{"role": "user", "content": user_message}],
                timeout=self.timeout,
            )
        except anthropic.APITimeoutError as e:
            raise UpstreamUnavailable("timeout", str(e)) from e
        except anthropic.APIError as e:
            raise UpstreamUnavailable("provider_error", str(e)) from e
        finally:
            llm_request_duration_seconds.observe(time.time() - start_time)

        for block in response.content:
            if block.type == "text":
                return block.text

        raise UpstreamUnavailable("empty_response", "No text content in AI response")
