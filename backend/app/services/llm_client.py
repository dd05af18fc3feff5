"""Unified completion client — tries OpenAI first, falls back to Anthropic."""

import logging

from openai import AsyncOpenAI
import anthropic

from app.config import Settings

logger = logging.getLogger(__name__)


class LLMError(RuntimeError):
    """Every configured completion provider failed."""


class LLMNotConfiguredError(LLMError):
    """No completion provider has an API key."""


class LLMClient:
    """Async completion client with OpenAI primary + Anthropic fallback."""

    def __init__(
        self,
        openai_api_key: str = "",
        anthropic_api_key: str = "",
        *,
        openai_model: str = "gpt-4o-mini",
        anthropic_model: str = "claude-sonnet-4-5-20250929",
    ):
        self._openai = None
        self._anthropic = None
        self.openai_model = openai_model
        self.anthropic_model = anthropic_model

        if openai_api_key:
            self._openai = AsyncOpenAI(api_key=openai_api_key)
        if anthropic_api_key:
            self._anthropic = anthropic.AsyncAnthropic(api_key=anthropic_api_key)

    @classmethod
    def from_settings(cls, settings: Settings) -> "LLMClient":
        return cls(
            settings.openai_api_key,
            settings.anthropic_api_key,
            openai_model=settings.openai_model,
            anthropic_model=settings.anthropic_model,
        )

    @property
    def available(self) -> bool:
        return self._openai is not None or self._anthropic is not None

    async def complete(
        self,
        system: str,
        user: str,
        *,
        max_tokens: int = 300,
        temperature: float = 0,
        json_mode: bool = False,
    ) -> str:
        """Get a completion from the best available provider.

        Args:
            system: System prompt
            user: User message
            max_tokens: Max output tokens
            temperature: Sampling temperature
            json_mode: If True, force JSON output (OpenAI response_format)

        Returns:
            Raw text response, whitespace-stripped.

        Raises:
            LLMNotConfiguredError if no provider has a key.
            LLMError if every configured provider fails.
        """
        if not self.available:
            raise LLMNotConfiguredError("No completion API key configured")

        errors = []
        chat_messages = [{"role": "user", "content": user}]

        if self._openai:
            try:
                kwargs: dict = {
                    "model": self.openai_model,
                    "max_tokens": max_tokens,
                    "temperature": temperature,
                    "messages": [{"role": "system", "content": system}] + chat_messages,
                }
                if json_mode:
                    kwargs["response_format"] = {"type": "json_object"}
                response = await self._openai.chat.completions.create(**kwargs)
                content = response.choices[0].message.content
                if not content:
                    raise ValueError("empty completion")
                return content.strip()
            except Exception as e:
                errors.append(f"OpenAI: {e}")
                if self._anthropic:
                    logger.warning(f"OpenAI failed, trying Anthropic: {e}")
                else:
                    logger.warning(f"OpenAI failed: {e}")

        if self._anthropic:
            try:
                response = await self._anthropic.messages.create(
                    model=self.anthropic_model,
                    max_tokens=max_tokens,
                    temperature=temperature,
                    system=system,
                    messages=chat_messages,
                )
                return response.content[0].text.strip()
            except Exception as e:
                errors.append(f"Anthropic: {e}")
                logger.warning(f"Anthropic failed: {e}")

        raise LLMError(f"All LLM providers failed: {'; '.join(errors)}")

    async def close(self):
        if self._openai:
            await self._openai.close()
        if self._anthropic:
            await self._anthropic.close()
