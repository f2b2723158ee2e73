from .daily_gate import DailyGate, DailyGateStats, current_utc_day
from .token_bucket import TokenBucketRateLimiter, resolve_client_id, UNKNOWN_CLIENT_ID

__all__ = [
    "DailyGate",
    "DailyGateStats",
    "current_utc_day",
    "TokenBucketRateLimiter",
    "resolve_client_id",
    "UNKNOWN_CLIENT_ID",
]
