import json
import re
from typing import Any, Dict, List

import requests
from requests import RequestException

from artisan_market.domain.errors import LLMUnavailable
from artisan_market.utils.logging import get_logger
from artisan_market.utils.retry import http_retry
from artisan_market.utils.settings import (
    GROQ_API_KEY,
    GROQ_BASE_URL,
    GROQ_MODEL,
    LLM_TIMEOUT_SECONDS,
)

logger = get_logger(__name__)

JSON_SYSTEM_PROMPT = (
    "You are an enterprise business intelligence engine for an Indian artisan marketplace. "
    "Respond with valid JSON only, no markdown and no commentary."
)

_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


def strip_code_fences(text: str) -> str:
    return _FENCE.sub("", text.strip()).strip()


def _reject_constant(name: str):
    # bare NaN / Infinity are accepted by json.loads but cannot be rendered back out
    raise ValueError(f"non-finite number {name}")


class GroqClient:
    """Chat completions against Groq's OpenAI-compatible endpoint."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        base_url: str | None = None,
        timeout: int = LLM_TIMEOUT_SECONDS,
    ):
        self.api_key = GROQ_API_KEY if api_key is None else api_key
        self.model = model or GROQ_MODEL
        self.base_url = (base_url or GROQ_BASE_URL).rstrip("/")
        self.timeout = timeout

    def is_configured(self) -> bool:
        return bool(self.api_key)

    @http_retry()
    def _post(self, payload: Dict[str, Any]) -> requests.Response:
        return requests.post(
            f"{self.base_url}/chat/completions",
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
            json=payload,
            timeout=self.timeout,
        )

    def complete(
        self,
        messages: List[Dict[str, str]],
        temperature: float = 0.7,
        max_tokens: int = 1000,
    ) -> str:
        if not self.is_configured():
            raise LLMUnavailable("GROQ_API_KEY not configured")

        payload = {
            "model": self.model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        try:
            resp = self._post(payload)
        except RequestException as e:
            logger.warning(f"Groq request failed: {e}")
            raise LLMUnavailable(str(e)) from e

        if resp.status_code != 200:
            logger.warning(f"Groq returned {resp.status_code}: {resp.text[:200]}")
            raise LLMUnavailable(f"LLM returned HTTP {resp.status_code}")

        try:
            data = resp.json()
            content = (data.get("choices") or [{}])[0].get("message", {}).get("content") or ""
        except (ValueError, AttributeError, IndexError) as e:
            logger.warning(f"Groq returned an unreadable body: {resp.text[:200]}")
            raise LLMUnavailable("LLM returned an unreadable response") from e
        if not content.strip():
            raise LLMUnavailable("LLM returned an empty completion")

        usage = data.get("usage", {})
        logger.info(f"Groq completion ok, tokens={usage.get('total_tokens', 0)}")
        return content.strip()

    def complete_json(self, prompt: str, temperature: float = 0.3, max_tokens: int = 1500) -> Dict[str, Any]:
        text = self.complete(
            [
                {"role": "system", "content": JSON_SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            temperature=temperature,
            max_tokens=max_tokens,
        )
        try:
            parsed = json.loads(strip_code_fences(text), parse_constant=_reject_constant)
        except ValueError as e:
            logger.warning(f"LLM returned non-JSON content: {text[:120]}")
            raise LLMUnavailable("LLM returned invalid JSON") from e

        if not isinstance(parsed, dict):
            raise LLMUnavailable("LLM returned JSON that is not an object")
        return parsed
