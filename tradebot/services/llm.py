import logging
from typing import Optional
from together import Together
from tradebot.config.settings import (
    TOGETHER_API_KEY,
    LLM_API_BASE_URL,
    LLM_MODEL,
    LLM_MAX_TOKENS,
    LLM_TEMPERATURE
)
from tradebot.models.result import (
    Err,
    ErrorKind,
    Ok,
    Result,
    REASON_INVALID_RESPONSE,
    SOURCE_CHAT
)

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are a helpful AI trading assistant with access to real cryptocurrency data.
When users ask about cryptocurrency prices, trends, or specific coins, you should provide accurate,
up-to-date information. For memecoins specifically, mention that they are highly volatile and
recommend thorough research before investing. Keep responses concise and informative.

If users ask about trading but don't use the /trade command, guide them to use /trade for trading operations."""

class LLMService:
    def __init__(self, api_key: Optional[str] = TOGETHER_API_KEY, client=None, model: str = LLM_MODEL,
                 max_tokens: int = LLM_MAX_TOKENS, temperature: float = LLM_TEMPERATURE,
                 base_url: Optional[str] = LLM_API_BASE_URL):
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        if client is None and api_key:
            client = Together(api_key=api_key, base_url=base_url, max_retries=0)
        self.client = client

    @property
    def configured(self) -> bool:
        return self.client is not None

    def complete(self, message: str) -> Result:
        """Forward a message to the chat completion endpoint"""
        if not self.configured:
            logger.error("LLM API key not configured")
            return Err(ErrorKind.CONFIG, SOURCE_CHAT, "TOGETHER_API_KEY is not set")

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": message},
                ],
                max_tokens=self.max_tokens,
                temperature=self.temperature,
            )
        except Exception as e:
            logger.error(f"LLM request failed: {e}")
            return Err(ErrorKind.UPSTREAM, SOURCE_CHAT, str(e))

        try:
            reply = response.choices[0].message.content
        except (AttributeError, IndexError, KeyError, TypeError):
            reply = None

        if not isinstance(reply, str) or not reply.strip():
            logger.error(f"Invalid LLM response format: {response}")
            return Err(ErrorKind.UPSTREAM, SOURCE_CHAT, "missing completion text", REASON_INVALID_RESPONSE)

        return Ok(reply.strip())
