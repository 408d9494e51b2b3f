"""
Unified LLM client supporting both OpenAI and Anthropic models.
"""
from typing import Optional

import anthropic
from openai import OpenAI

from docsync.config import config, detect_provider
from docsync.exceptions import ConfigurationError, MissingCredentialError
from docsync.utils.logger import get_logger

logger = get_logger(__name__, "LLMClient")


class LLMClient:
    """
    Thin chat-completion wrapper over the OpenAI and Anthropic SDKs.

    SDK-level retries are disabled: retry policy belongs to the caller.
    """

    def __init__(self, model: str, temperature: float = 0.3, provider: Optional[str] = None):
        self.model = model
        self.temperature = temperature
        self.provider = provider.lower() if provider else detect_provider(model)

        if self.provider == "openai":
            if not config.OPENAI_API_KEY:
                raise MissingCredentialError("OPENAI_API_KEY not configured")
            self.client = OpenAI(
                api_key=config.OPENAI_API_KEY,
                max_retries=0,
                timeout=config.LLM_TIMEOUT,
            )
        elif self.provider == "anthropic":
            if not config.ANTHROPIC_API_KEY:
                raise MissingCredentialError("ANTHROPIC_API_KEY not configured")
            self.client = anthropic.Anthropic(
                api_key=config.ANTHROPIC_API_KEY,
                max_retries=0,
                timeout=config.LLM_TIMEOUT,
            )
        else:
            raise ConfigurationError(f"Unsupported provider: {self.provider}")

        logger.debug(f"Initialised {self.provider.upper()} client with model: {self.model}", run_id="INIT")

    def chat_completion(self, system_prompt: str, user_prompt: str, max_tokens: int = 4096) -> str:
        logger.debug(
            f"Starting {self.provider} API call: model={self.model}, max_tokens={max_tokens}",
            run_id="API_CALL",
        )
        try:
            if self.provider == "openai":
                return self._openai_completion(system_prompt, user_prompt, max_tokens)
            return self._anthropic_completion(system_prompt, user_prompt, max_tokens)
        except Exception as e:
            logger.error(
                f"API call failed - Type: {type(e).__name__}, Message: {e}",
                run_id="API_CALL",
                exc_info=True,
            )
            raise

    def _openai_completion(self, system_prompt: str, user_prompt: str, max_tokens: int) -> str:
        response = self.client.chat.completions.create(
            model=self.model,
            max_tokens=max_tokens,
            temperature=self.temperature,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
        )
        return response.choices[0].message.content or ""

    def _anthropic_completion(self, system_prompt: str, user_prompt: str, max_tokens: int) -> str:
        message = self.client.messages.create(
            model=self.model,
            max_tokens=max_tokens,
            temperature=self.temperature,
            system=system_prompt,
            messages=[{"role": "user", "content": user_prompt}],
        )
        return message.content[0].text
