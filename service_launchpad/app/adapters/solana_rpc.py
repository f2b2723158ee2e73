"""
Solana JSON-RPC client used for mint-authority reads and health checks.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx
from solders.pubkey import Pubkey

from shared.errors import ExternalServiceError, ValidationError
from shared.logging import get_logger
from shared.retry import RetryConfig, retry_on_exception


RETRIABLE_STATUS_CODES = {408, 429, 500, 502, 503, 504}


class RetriableRpcStatus(Exception):
    """HTTP status from the RPC node that is worth retrying."""

    def __init__(self, status_code: int):
        self.status_code = status_code
        super().__init__(f"RPC node returned HTTP {status_code}")


@dataclass(frozen=True)
class MintAuthorities:
    mint: str
    mint_authority: Optional[str]
    freeze_authority: Optional[str]
    decimals: int


def validate_pubkey(value: str, field: str = "mint") -> str:
    """Return ``value`` if it is a base58 public key, else raise ValidationError."""
    if not is_valid_pubkey(value):
        raise ValidationError(f"Invalid {field} address", details={field: value})
    return value


def is_valid_pubkey(value: str) -> bool:
    if not value or not isinstance(value, str):
        return False
    try:
        Pubkey.from_string(value)
    except ValueError:
        return False
    return True


class SolanaRpcClient:
    """Minimal async JSON-RPC client for a Solana node."""

    def __init__(
        self,
        rpc_url: str,
        *,
        commitment: str = "confirmed",
        timeout: float = 10.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.rpc_url = rpc_url
        self.commitment = commitment
        self.logger = get_logger("launchpad.solana_rpc")
        self._client = http_client or httpx.AsyncClient(timeout=timeout)
        self._request_id = 0

    async def close(self) -> None:
        await self._client.aclose()

    @retry_on_exception((httpx.TransportError, RetriableRpcStatus), config=RetryConfig(max_attempts=3, base_delay=0.5))
    async def _post(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        response = await self._client.post(self.rpc_url, json=payload)
        if response.status_code in RETRIABLE_STATUS_CODES:
            raise RetriableRpcStatus(response.status_code)
        response.raise_for_status()
        return response.json()

    async def call(self, method: str, params: Optional[List[Any]] = None) -> Any:
        """Perform a JSON-RPC call and return its ``result``.

        Raises:
            ExternalServiceError: On transport failures, HTTP errors or an RPC error object.
        """
        self._request_id += 1
        payload = {
            "jsonrpc": "2.0",
            "id": self._request_id,
            "method": method,
            "params": params or [],
        }

        try:
            body = await self._post(payload)
        except (httpx.HTTPError, RetriableRpcStatus, ValueError) as exc:
            self.logger.error("Solana RPC request failed", method=method, error=str(exc))
            raise ExternalServiceError("solana_rpc", str(exc) or type(exc).__name__, details={"method": method})

        if not isinstance(body, dict):
            raise ExternalServiceError("solana_rpc", "Malformed RPC response", details={"method": method})
        if "error" in body:
            error = body["error"] if isinstance(body["error"], dict) else {}
            raise ExternalServiceError(
                "solana_rpc",
                error.get("message", "Unknown RPC error"),
                details={"method": method, "rpc_code": error.get("code")},
            )
        return body.get("result")

    async def get_mint_authorities(self, mint: str) -> MintAuthorities:
        """Read the mint and freeze authorities of an SPL token mint."""
        validate_pubkey(mint)
        result = await self.call(
            "getAccountInfo",
            [mint, {"encoding": "jsonParsed", "commitment": self.commitment}],
        )

        value = result.get("value") if isinstance(result, dict) else None
        if value is None:
            raise ExternalServiceError("solana_rpc", "Mint account not found", details={"mint": mint})
        if not isinstance(value, dict):
            raise ExternalServiceError("solana_rpc", "Malformed account info", details={"mint": mint})

        data = value.get("data")
        parsed = data.get("parsed") if isinstance(data, dict) else None
        if not isinstance(parsed, dict) or parsed.get("type") != "mint":
            raise ExternalServiceError("solana_rpc", "Account is not a token mint", details={"mint": mint})

        info = parsed.get("info")
        decimals = info.get("decimals", 0) if isinstance(info, dict) else None
        if not isinstance(decimals, int) or isinstance(decimals, bool):
            raise ExternalServiceError("solana_rpc", "Malformed mint info", details={"mint": mint})
        return MintAuthorities(
            mint=mint,
            mint_authority=info.get("mintAuthority"),
            freeze_authority=info.get("freezeAuthority"),
            decimals=decimals,
        )

    async def get_slot(self) -> int:
        slot = await self.call("getSlot", [{"commitment": "processed"}])
        if not isinstance(slot, int):
            raise ExternalServiceError("solana_rpc", "Malformed slot response")
        return slot
