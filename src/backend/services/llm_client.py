"""
LLM client wrapper for problem classification.

Provides one interface over OpenAI-compatible chat completion endpoints
(OpenAI itself or a hosted gateway via OPENAI_BASE_URL) and Anthropic, with
bounded timeouts and a small error hierarchy.
"""

import asyncio
from typing import Dict, Any, Optional
from anthropic import AsyncAnthropic
from openai import AsyncOpenAI
from config import settings


class LLMClientError(Exception):
    """Base exception for LLM client errors."""
    pass


class LLMTimeoutError(LLMClientError):
    """Raised when LLM call exceeds timeout."""
    pass


class LLMProviderError(LLMClientError):
    """Raised when LLM provider returns an error (transport, status, quota, auth)."""
    pass


class LLMClient:
    """
    Unified client for calling LLM providers.

    A provider whose API key is not configured is treated as unavailable:
    calling it raises LLMClientError without any network traffic.
    """

    def __init__(self):
        """Initialize provider clients from settings."""
        self.openai_client = None
        self.anthropic_client = None

        if settings.OPENAI_API_KEY:
            self.openai_client = AsyncOpenAI(
                api_key=settings.OPENAI_API_KEY,
                base_url=settings.OPENAI_BASE_URL,
                max_retries=0,
            )

        if settings.ANTHROPIC_API_KEY:
            self.anthropic_client = AsyncAnthropic(
                api_key=settings.ANTHROPIC_API_KEY,
                max_retries=0,
            )

    def is_configured(self, provider: str) -> bool:
        provider_lower = provider.lower()
        if provider_lower == "openai":
            return self.openai_client is not None
        if provider_lower == "anthropic":
            return self.anthropic_client is not None
        return False

    async def call_openai(
        self,
        model_name: str,
        system_prompt: str,
        user_message: str,
        temperature: float,
        max_tokens: int,
        timeout: int
    ) -> Dict[str, Any]:
        """
        Call an OpenAI-compatible chat completions endpoint.

        Returns:
            Dict containing:
                - content: Raw text of choices[0].message.content ("" if absent)
                - model: Model used

        Raises:
            LLMClientError: If OpenAI client not configured
            LLMTimeoutError: If call exceeds timeout
            LLMProviderError: If provider returns error
        """
        if not self.openai_client:
            raise LLMClientError("OpenAI API key not configured")

        try:
            response = await asyncio.wait_for(
                self.openai_client.chat.completions.create(
                    model=model_name,
                    messages=[
                        {"role": "system", "content": system_prompt},
                        {"role": "user", "content": user_message}
                    ],
                    temperature=temperature,
                    max_tokens=max_tokens
                ),
                timeout=timeout
            )
        except asyncio.TimeoutError:
            raise LLMTimeoutError(f"OpenAI call exceeded timeout of {timeout}s")
        except Exception as e:
            raise LLMProviderError(f"OpenAI API error: {str(e)}")

        if not response.choices:
            raise LLMProviderError("OpenAI response contained no choices")

        return {
            "content": response.choices[0].message.content or "",
            "model": response.model,
        }

    async def call_anthropic(
        self,
        model_name: str,
        system_prompt: str,
        user_message: str,
        temperature: float,
        max_tokens: int,
        timeout: int
    ) -> Dict[str, Any]:
        """
        Call Anthropic messages API.

        Returns the same shape as call_openai.
        """
        if not self.anthropic_client:
            raise LLMClientError("Anthropic API key not configured")

        try:
            response = await asyncio.wait_for(
                self.anthropic_client.messages.create(
                    model=model_name,
                    system=system_prompt,
                    messages=[
                        {"role": "user", "content": user_message}
                    ],
                    temperature=temperature,
                    max_tokens=max_tokens
                ),
                timeout=timeout
            )
        except asyncio.TimeoutError:
            raise LLMTimeoutError(f"Anthropic call exceeded timeout of {timeout}s")
        except Exception as e:
            raise LLMProviderError(f"Anthropic API error: {str(e)}")

        text_parts = [block.text for block in response.content if hasattr(block, "text")]
        return {
            "content": "".join(text_parts),
            "model": response.model,
        }

    async def call(
        self,
        provider: str,
        model_name: str,
        system_prompt: str,
        user_message: str,
        temperature: float = 0.3,
        max_tokens: int = 300,
        timeout: Optional[int] = None
    ) -> Dict[str, Any]:
        """
        Unified interface for calling any LLM provider.

        Args:
            provider: Provider name ("openai" or "anthropic")
            model_name: Model identifier
            system_prompt: System prompt
            user_message: User message
            temperature: Sampling temperature
            max_tokens: Maximum tokens to generate
            timeout: Timeout in seconds (defaults to CLASSIFIER_TIMEOUT)

        Raises:
            LLMClientError: If provider not supported or not configured
            LLMTimeoutError: If call exceeds timeout
            LLMProviderError: If provider returns error
        """
        if timeout is None:
            timeout = settings.CLASSIFIER_TIMEOUT

        provider_lower = provider.lower()
        kwargs = dict(
            model_name=model_name,
            system_prompt=system_prompt,
            user_message=user_message,
            temperature=temperature,
            max_tokens=max_tokens,
            timeout=timeout
        )

        if provider_lower == "openai":
            return await self.call_openai(**kwargs)
        elif provider_lower == "anthropic":
            return await self.call_anthropic(**kwargs)
        else:
            raise LLMClientError(f"Unsupported provider: {provider}")

    async def close(self):
        """Release the HTTP connection pools held by the provider SDK clients."""
        if self.openai_client:
            await self.openai_client.close()
        if self.anthropic_client:
            await self.anthropic_client.close()
