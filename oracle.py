"""
AI phishing judge backed by an OpenAI vision model.

The scoring pipeline only depends on the ``Classifier`` interface, so tests and
alternative providers can plug in their own implementation.
"""
import base64
import json
import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx

from http_client import post_json
from models import AIError, AIVerdict, ScreenshotResult

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are a cybersecurity expert specializing in phishing detection.
Analyze the provided website data and screenshot to determine if it is Safe, Suspicious, or Dangerous.

Focus on VISUAL IMPERSONATION:
- Does the screenshot look like a major brand (Microsoft, Google, Bank, Netflix etc.)?
- If yes, does the domain MATCH the official domain of that brand?
- If it looks like a brand but the domain is unrelated, MARK AS DANGEROUS IMMEDIATELY.

Also consider technical signals:
- New domains (< 1 month) are suspicious.
- Mismatched SSL issuers are suspicious.

OUTPUT JSON format with fields:
- result: one of "safe", "suspicious", "dangerous"
- reasons: array of short strings
- brand_name: the brand being impersonated, only if the site imitates one
- legitimate_url: the brand's official URL, only if brand_name is set"""


def _as_str_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, (str, int, float, bool)):
        return [str(value)]
    if isinstance(value, list):
        out: list[str] = []
        for item in value:
            if item is None:
                continue
            s = str(item).strip()
            if s:
                out.append(s)
        return out
    return [str(value)]


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def normalize_verdict(raw: Any) -> AIVerdict | AIError:
    """Normalize model output to an AIVerdict.

    The result string is only trimmed and lower-cased; mapping it to a score
    (and treating unknown values as unavailable) is the scorer's job.
    """
    if not isinstance(raw, dict):
        return AIError(error="Malformed AI response")

    result = _optional_str(raw.get("result"))
    if result is None:
        return AIError(error="Failed to get analysis from AI", details=json.dumps(raw)[:500])

    brand_name = _optional_str(raw.get("brand_name"))
    legitimate_url = _optional_str(raw.get("legitimate_url"))

    return AIVerdict(
        result=result.lower(),
        reasons=tuple(_as_str_list(raw.get("reasons"))),
        brand_name=brand_name,
        legitimate_url=legitimate_url,
    )


class Classifier(ABC):
    """Anything that can judge a site from its technical summary and screenshot."""

    @abstractmethod
    async def classify(
        self,
        summary: dict[str, Any],
        image: ScreenshotResult | None = None,
    ) -> AIVerdict | AIError:
        """Return a verdict, or an AIError marker. Must not raise."""
        pass


class OpenAIClassifier(Classifier):
    """Calls the chat completions endpoint of an OpenAI-compatible API."""

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o",
        base_url: str = "https://api.openai.com/v1",
        timeout: float = 30.0,
        max_tokens: int = 1000,
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_tokens = max_tokens

    def _build_messages(
        self,
        summary: dict[str, Any],
        image: ScreenshotResult | None,
    ) -> list[dict[str, Any]]:
        url = summary.get("url", "Unknown")
        user_content: list[dict[str, Any]] = [
            {
                "type": "text",
                "text": f"Analyze this website: {url}\n\nTECHNICAL DATA:\n{json.dumps(summary, indent=2)}",
            }
        ]
        if image is not None:
            encoded = base64.b64encode(image.data).decode("ascii")
            user_content.append({
                "type": "image_url",
                "image_url": {"url": f"data:{image.mime};base64,{encoded}"},
            })
        return [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": user_content},
        ]

    async def classify(
        self,
        summary: dict[str, Any],
        image: ScreenshotResult | None = None,
    ) -> AIVerdict | AIError:
        if not self.api_key:
            return AIError(error="OPENAI_API_KEY not configured")

        payload = {
            "model": self.model,
            "messages": self._build_messages(summary, image),
            "response_format": {"type": "json_object"},
            "max_tokens": self.max_tokens,
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}

        try:
            data, status_code = await post_json(
                f"{self.base_url}/chat/completions",
                payload,
                headers=headers,
                timeout=self.timeout,
            )
        except (httpx.HTTPError, ValueError) as e:
            logger.error("AI analysis failed: %s", e)
            return AIError(error="AI Analysis failed to execute")

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            logger.error("OpenAI API error (HTTP %s): %s", status_code, str(data)[:500])
            return AIError(error="Failed to get analysis from AI", details=str(data)[:500])

        try:
            parsed = json.loads(content)
        except (TypeError, ValueError):
            logger.error("AI returned non-JSON content: %s", str(content)[:200])
            return AIError(error="Malformed AI response")

        return normalize_verdict(parsed)
