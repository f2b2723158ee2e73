"""
Meme kit generation with per-client rate limits and a daily AI quota.
"""

from typing import Any, Dict, List, Optional, Tuple

from shared.errors import ExternalServiceError, QuotaExhaustedError, RateLimitError
from shared.logging import get_logger
from ..adapters.ai_client import AiTaglineClient
from ..caching.ttl_cache import TTLCache
from ..ratelimit.daily_gate import DailyGate
from ..ratelimit.token_bucket import TokenBucketRateLimiter
from .content import (
    STICKER_TEXTS,
    MemeKitRequest,
    badge_for,
    generate_meme_content,
    hashtagify,
    template_taglines,
)


class AiStatus:
    DISABLED = "disabled"
    OK = "ok"
    UNAVAILABLE = "unavailable"
    RATE_LIMITED = "rate_limited"
    DAILY_QUOTA_EXHAUSTED = "daily_quota_exhausted"
    FAILED = "failed"


class MemeKitService:
    """Builds meme kits.

    Every request spends one take from the endpoint bucket. AI taglines
    additionally spend one take from the AI bucket and one unit of the daily
    gate; when either is denied the kit is still produced with template
    taglines unless the caller insisted on AI. Successful AI taglines are
    cached per name, ticker and vibe and served without spending either.
    """

    def __init__(
        self,
        *,
        endpoint_bucket: TokenBucketRateLimiter,
        ai_bucket: TokenBucketRateLimiter,
        daily_gate: DailyGate,
        cache: TTLCache,
        ai_client: Optional[AiTaglineClient] = None,
    ):
        self.endpoint_bucket = endpoint_bucket
        self.ai_bucket = ai_bucket
        self.daily_gate = daily_gate
        self.cache = cache
        self.ai_client = ai_client
        self.logger = get_logger("launchpad.meme_kit")

    async def generate(self, client_id: str, request: MemeKitRequest) -> Dict[str, Any]:
        if not self.endpoint_bucket.take(client_id):
            raise RateLimitError(details={"limiter": self.endpoint_bucket.name})

        taglines, ai_status = await self._taglines(client_id, request)
        return self._build(request, taglines, ai_status)

    def _build(self, request: MemeKitRequest, taglines: List[str], ai_status: str) -> Dict[str, Any]:
        content = generate_meme_content(request.name, request.ticker, request.vibe)

        self.logger.info(
            "Generated meme kit",
            ticker=request.ticker,
            vibe=request.vibe.value,
            preset=request.preset.value,
            ai_status=ai_status,
        )
        return {
            "name": request.name,
            "ticker": request.ticker,
            "vibe": request.vibe.value,
            "preset": request.preset.value,
            "share_url": request.share_url,
            "badge": badge_for(request.preset),
            "taglines": taglines,
            "content": content,
            "stickers": [f"${request.ticker} {text}" for text in STICKER_TEXTS],
            "share_text": f"{request.name} (${request.ticker}) {request.share_url} #{hashtagify(request.ticker)}",
            "ai": {"requested": request.use_ai, "status": ai_status},
        }

    async def _taglines(self, client_id: str, request: MemeKitRequest) -> Tuple[List[str], str]:
        fallback = template_taglines(request.name, request.ticker, request.vibe)
        if not request.use_ai:
            return fallback, AiStatus.DISABLED

        # Only successful AI output is shared; denials belong to the caller.
        key = request.tagline_key()
        cached = self.cache.peek(key)
        if cached is not None:
            return cached, AiStatus.OK

        if self.ai_client is None or not self.ai_client.available:
            if request.require_ai:
                raise ExternalServiceError("ai", "AI generation is not configured")
            return fallback, AiStatus.UNAVAILABLE

        if not self.ai_bucket.take(client_id):
            if request.require_ai:
                raise RateLimitError(details={"limiter": self.ai_bucket.name})
            return fallback, AiStatus.RATE_LIMITED

        if not self.daily_gate.take():
            self.logger.warning("Daily AI quota exhausted", day=self.daily_gate.day, max=self.daily_gate.maximum)
            if request.require_ai:
                raise QuotaExhaustedError(details={"gate": self.daily_gate.name})
            return fallback, AiStatus.DAILY_QUOTA_EXHAUSTED

        ai_client = self.ai_client
        try:
            taglines = await self.cache.get(
                key,
                lambda: ai_client.generate_taglines(request.name, request.ticker, request.vibe.value),
            )
        except ExternalServiceError:
            if request.require_ai:
                raise
            return fallback, AiStatus.FAILED
        return taglines, AiStatus.OK

    def usage(self) -> Dict[str, Any]:
        stats = self.daily_gate.stats()
        return {"day": stats.day, "count": stats.count, "max": self.daily_gate.maximum}
