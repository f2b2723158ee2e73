"""
Chat-completions client used for AI-written meme taglines.
"""

from typing import List, Optional

import httpx

from shared.errors import ExternalServiceError
from shared.logging import get_logger


class AiTaglineClient:
    """Talks to an OpenAI-compatible ``/chat/completions`` endpoint."""

    def __init__(
        self,
        api_key: Optional[str],
        *,
        base_url: str = "https://api.openai.com/v1",
        model: str = "gpt-4o-mini",
        timeout: float = 20.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.logger = get_logger("launchpad.ai_client")
        self._client = http_client or httpx.AsyncClient(timeout=timeout)

    @property
    def available(self) -> bool:
        return bool(self.api_key)

    async def close(self) -> None:
        await self._client.aclose()

    async def generate_taglines(self, name: str, ticker: str, vibe: str, count: int = 3) -> List[str]:
        if not self.available:
            raise ExternalServiceError("ai", "AI generation is not configured")

        prompt = (
            f"Write {count} short, punchy one-line taglines for a Solana meme token "
            f"called {name} (${ticker}). Tone: {vibe}. One tagline per line, no numbering."
        )
        payload = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": 0.9,
            "max_tokens": 200,
        }

        try:
            response = await self._client.post(
                f"{self.base_url}/chat/completions",
                json=payload,
                headers={"Authorization": f"Bearer {self.api_key}"},
            )
            response.raise_for_status()
            content = response.json()["choices"][0]["message"]["content"]
        except (httpx.HTTPError, ValueError, KeyError, IndexError, TypeError) as exc:
            self.logger.error("AI tagline generation failed", ticker=ticker, error=str(exc) or type(exc).__name__)
            raise ExternalServiceError("ai", "Tagline generation failed", details={"error": str(exc)})

        lines = [line.strip().lstrip("-*").strip() for line in str(content).splitlines()]
        taglines = [line for line in lines if line][:count]
        if not taglines:
            raise ExternalServiceError("ai", "Empty tagline response")
        return taglines
