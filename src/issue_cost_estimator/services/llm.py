"""
llm.py
~~~~~~

Single entry-point ``LLMRouter.complete(prompt)`` that hides the differences
between the supported chat-completion back-ends.

* OpenAI  – ``openai/<model>``, official ``openai`` SDK
* Ollama  – ``ollama/<model>``, same SDK against Ollama's ``/v1`` endpoint

Returns **str** (assistant reply) or raises ``ClassifierError``.
"""

from __future__ import annotations

from openai import AsyncOpenAI, OpenAIError

from ..core.exceptions import ClassifierError, ConfigurationError


def split_model_id(model_id: str) -> tuple[str, str]:
    """
    Split ``provider/model`` into its two parts.

    Raises:
        ConfigurationError: If the provider is not supported
    """
    provider, _, model = model_id.partition("/")
    if provider not in ("openai", "ollama") or not model:
        raise ConfigurationError("Unsupported LLM model identifier", model_id=model_id)
    return provider, model


class LLMRouter:
    """Async chat-completion client routed by model-id prefix."""

    def __init__(
        self,
        api_key: str,
        model_id: str,
        *,
        ollama_url: str = "http://localhost:11434",
        max_tokens: int = 1024,
        temperature: float = 0.2,
        timeout_s: float = 120.0,
        client: AsyncOpenAI | None = None,
    ) -> None:
        self.provider, self.model = split_model_id(model_id)
        self.max_tokens = max_tokens
        self.temperature = temperature

        if client is not None:
            self._client = client
        elif self.provider == "ollama":
            self._client = AsyncOpenAI(
                api_key=api_key,
                base_url=f"{ollama_url.rstrip('/')}/v1",
                timeout=timeout_s,
                max_retries=0,
            )
        else:
            self._client = AsyncOpenAI(api_key=api_key, timeout=timeout_s, max_retries=0)

    async def aclose(self) -> None:
        await self._client.close()

    async def complete(self, prompt: str) -> str:
        """
        Send a single user prompt and return the assistant reply.

        Raises:
            ClassifierError: On network, authentication, quota or shape errors
        """
        try:
            response = await self._client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=self.max_tokens,
                temperature=self.temperature,
            )
        except OpenAIError as e:
            raise ClassifierError(
                "LLM request failed", provider=self.provider, error=str(e)
            ) from e

        if not response.choices:
            raise ClassifierError("LLM returned no choices", provider=self.provider)
        content = response.choices[0].message.content
        if not content:
            raise ClassifierError("LLM returned an empty reply", provider=self.provider)
        return content.strip()
