"""
Thin async client for OpenRouter chat completions.

OpenRouter speaks the OpenAI wire protocol, so the official openai SDK is used
with OpenRouter's base URL. Every provider failure is converted into one of
the service-layer exceptions so callers never see SDK types.
"""

import logging
import time
from typing import Any, Dict, List, Optional

import openai
from openai import AsyncOpenAI

from config import settings
from services.exceptions import AIProviderError, AIProviderTimeoutError, MissingAPIKeyError

logger = logging.getLogger(__name__)


class OpenRouterClient:
    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        api_key = api_key or settings.OPENROUTER_API_KEY
        if not api_key:
            logger.error("OPENROUTER_API_KEY is not configured")
            raise MissingAPIKeyError()

        self.model = model or settings.OPENROUTER_MODEL
        self.client = AsyncOpenAI(
            base_url=base_url or settings.OPENROUTER_BASE_URL,
            api_key=api_key,
            timeout=timeout or settings.LLM_REQUEST_TIMEOUT,
            max_retries=0,
        )

    async def generate_chat_completion(
        self,
        messages: List[Dict[str, str]],
        temperature: float = 0.7,
        max_tokens: int = 2000,
        json_response: bool = False,
        model: Optional[str] = None,
    ) -> str:
        """Send the messages and return the content of the first choice."""
        request_params: Dict[str, Any] = {
            "model": model or self.model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
            "extra_headers": {
                "HTTP-Referer": settings.OPENROUTER_APP_URL,
                "X-Title": settings.OPENROUTER_APP_TITLE,
            },
        }
        if json_response:
            request_params["response_format"] = {"type": "json_object"}

        start_time = time.time()
        try:
            response = await self.client.chat.completions.create(**request_params)
        except openai.APITimeoutError as e:
            logger.error(f"OpenRouter request timed out after {time.time() - start_time:.2f}s: {e}")
            raise AIProviderTimeoutError() from e
        except openai.RateLimitError as e:
            logger.error(f"OpenRouter rate limit error: {e}")
            raise AIProviderError() from e
        except openai.APIConnectionError as e:
            logger.error(f"OpenRouter connection error: {e}")
            raise AIProviderError() from e
        except openai.APIStatusError as e:
            logger.error(f"OpenRouter API error ({e.status_code}): {e.message}")
            raise AIProviderError() from e

        if not response or not response.choices or not response.choices[0].message.content:
            logger.error(f"Invalid OpenRouter response: {response}")
            raise AIProviderError()

        logger.info(f"OpenRouter call using model '{request_params['model']}' finished in {time.time() - start_time:.2f}s")
        return response.choices[0].message.content

    async def close(self):
        await self.client.close()


def get_openrouter_client() -> OpenRouterClient:
    return OpenRouterClient()
