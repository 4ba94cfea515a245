"""
AI market-price client: OpenAI-compatible chat completions over urllib.

Blocking by design: PriceFetcher runs it in a worker thread. Every call has
an explicit timeout and a bounded retry with exponential backoff.
Raises MarketPriceError on transport, HTTP, or parse failure; callers
decide how to degrade.
"""

import json
import logging
import socket
import time
import urllib.error
import urllib.request
from typing import Callable, Optional

from ..config import settings
from ..errors import MarketPriceError

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a construction material pricing expert with access to current "
    "market rates. Always respond with valid JSON only, no additional text."
)

TEMPERATURE = 0.3
MAX_TOKENS = 2000

# HTTP statuses worth another attempt
RETRYABLE_STATUS = {408, 429, 500, 502, 503, 504}


class _RetryableError(Exception):
    pass


class MarketPriceClient:
    """
    Thin chat-completions client.

    complete_json(user_prompt) → parsed JSON object from the first choice.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        retries: Optional[int] = None,
        backoff: Optional[float] = None,
        sleeper: Callable[[float], None] = time.sleep,
    ):
        self.api_key = settings.OPENAI_API_KEY if api_key is None else api_key
        self.base_url = (base_url or settings.OPENAI_BASE_URL).rstrip("/")
        self.model = model or settings.OPENAI_MODEL
        self.timeout = settings.PRICING_TIMEOUT_SECONDS if timeout is None else timeout
        self.retries = settings.PRICING_RETRIES if retries is None else retries
        self.backoff = settings.PRICING_BACKOFF_SECONDS if backoff is None else backoff
        self._sleep = sleeper

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def complete_json(self, user_prompt: str, system_prompt: str = SYSTEM_PROMPT,
                      json_mode: bool = False) -> dict:
        if not self.configured:
            raise MarketPriceError("No API key configured for market pricing")

        body = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": TEMPERATURE,
            "max_tokens": MAX_TOKENS,
        }
        if json_mode:
            body["response_format"] = {"type": "json_object"}

        content = self._with_retry(lambda: self._post(body))
        return parse_json_content(content)

    def _with_retry(self, action):
        attempt = 0
        while True:
            try:
                return action()
            except _RetryableError as exc:
                attempt += 1
                if attempt > self.retries:
                    raise MarketPriceError(str(exc)) from exc
                delay = max(0.0, self.backoff * (2 ** (attempt - 1)))
                logger.warning(
                    "Retrying market price request in %.2fs (%d/%d attempts) after error: %s",
                    delay, attempt, self.retries, exc,
                )
                if delay:
                    self._sleep(delay)

    def _post(self, body: dict) -> str:
        """One HTTP round trip. Returns the first choice's message content."""
        req = urllib.request.Request(
            f"{self.base_url}/chat/completions",
            data=json.dumps(body).encode("utf-8"),
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {self.api_key}",
            },
            method="POST",
        )
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as response:
                result = json.loads(response.read())
        except urllib.error.HTTPError as e:
            detail = e.read().decode("utf-8", errors="replace")[:300]
            message = f"Market price API error {e.code}: {detail}"
            if e.code in RETRYABLE_STATUS:
                raise _RetryableError(message) from e
            raise MarketPriceError(message) from e
        except (urllib.error.URLError, socket.timeout, TimeoutError, ConnectionError) as e:
            raise _RetryableError(f"Market price request failed: {e}") from e
        except json.JSONDecodeError as e:
            raise MarketPriceError(f"Market price API returned non-JSON body: {e}") from e

        try:
            content = result["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise MarketPriceError("Market price API response has no message content") from e
        if not content:
            raise MarketPriceError("Empty response from market price API")
        return content


def parse_json_content(content: str) -> dict:
    """Parse model output as a JSON object, tolerating a ```json fence."""
    text = content.strip()
    if text.startswith("```"):
        text = text.split("\n", 1)[1] if "\n" in text else ""
        if text.rstrip().endswith("```"):
            text = text.rstrip()[:-3]
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as e:
        raise MarketPriceError(f"Market price response is not valid JSON: {e}") from e
    if not isinstance(parsed, dict):
        raise MarketPriceError("Market price response is not a JSON object")
    return parsed
