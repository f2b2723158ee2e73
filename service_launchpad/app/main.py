"""
Launchpad API service: honest status, pool discovery, fees, canary and meme kits.
"""

import secrets
from dataclasses import asdict
from typing import Any, Dict, Optional

import httpx
from fastapi import Request

from shared.base_service import BaseService
from shared.config import ServiceConfig, get_config
from shared.errors import AuthenticationError, LaunchpadException, ValidationError
from shared.logging import set_client_context
from .context import AppContext
from .fees.ledger import SkimEvent
from .meme.content import validate_kit_request
from .ratelimit.token_bucket import resolve_client_id


SERVICE_NAME = "launchpad"
SERVICE_PORT = 8000


def _flag(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in ("1", "true", "yes")


async def _json_body(request: Request) -> Dict[str, Any]:
    try:
        body = await request.json()
    except ValueError:
        raise ValidationError("Request body must be valid JSON", code="InvalidBody")
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object", code="InvalidBody")
    return body


def _require_int(body: Dict[str, Any], field: str) -> int:
    value = body.get(field)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{field} must be an integer", details={"field": field})
    return value


def _optional_str(body: Dict[str, Any], field: str) -> Optional[str]:
    value = body.get(field)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string", details={"field": field})
    return value


def _optional_float(body: Dict[str, Any], field: str) -> Optional[float]:
    value = body.get(field)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{field} must be a number", details={"field": field})
    return float(value)


class LaunchpadService(BaseService):
    """Launchpad service implementation."""

    def __init__(self, config: Optional[ServiceConfig] = None, http_client: Optional[httpx.AsyncClient] = None):
        super().__init__(SERVICE_NAME, SERVICE_PORT, config or get_config(SERVICE_NAME, SERVICE_PORT))
        self.context = AppContext.from_config(self.config, metrics=self.metrics, http_client=http_client)

        validation = self.context.fees.validate()
        if not validation["is_valid"]:
            self.logger.warning("Fee configuration warnings", warnings=validation["warnings"])

        self._setup_launchpad_routes()

    async def on_startup(self):
        await self.context.start()
        self.logger.info(
            "Launchpad service started",
            network=self.config.network,
            canary=self.context.canary.status(),
        )

    async def on_shutdown(self):
        await self.context.close()

    async def _check_dependencies(self) -> Dict[str, str]:
        try:
            await self.context.rpc.get_slot()
            return {"solana_rpc": "ok"}
        except LaunchpadException as exc:
            self.logger.warning("Solana RPC health check failed", error=exc.message)
            return {"solana_rpc": "error"}

    def _require_admin(self, request: Request) -> None:
        expected = self.config.admin_token
        provided = request.headers.get("X-Admin-Token", "")
        if not expected or not secrets.compare_digest(provided.encode(), expected.encode()):
            raise AuthenticationError("Admin token required")

    def _setup_launchpad_routes(self):
        """Set up launchpad routes."""

        @self.app.get("/api/honest-status")
        async def honest_status(mint: Optional[str] = None, bust: Optional[str] = None):
            if not mint:
                raise ValidationError("mint query parameter is required", code="MissingMint")
            status = await self.context.honest.read_cached(mint, bust=_flag(bust))
            return status.model_dump()

        @self.app.post("/api/honest-status/batch")
        async def honest_status_batch(request: Request, bust: Optional[str] = None):
            body = await _json_body(request)
            mints = body.get("mints")
            if not isinstance(mints, list) or not any(isinstance(m, str) and m for m in mints):
                raise ValidationError("mints must be a non-empty list", code="MissingMints")
            statuses = await self.context.honest.read_many(
                [m for m in mints if isinstance(m, str)],
                bust=_flag(bust),
            )
            return {"results": [s.model_dump() for s in statuses]}

        @self.app.post("/api/honest-status/invalidate")
        async def honest_status_invalidate(request: Request, mint: Optional[str] = None):
            if not mint and await request.body():
                mint = (await _json_body(request)).get("mint")
            if not mint or not isinstance(mint, str):
                raise ValidationError("mint is required", code="MissingMint")
            return {"mint": mint, "invalidated": self.context.honest.invalidate(mint)}

        @self.app.get("/api/liquidity/pool")
        async def liquidity_pool(mint: Optional[str] = None, bust: Optional[str] = None):
            if not mint:
                raise ValidationError("mint query parameter is required", code="MissingMint")
            lookup = await self.context.pools.find_clmm_pool_id(mint, bust=_flag(bust))
            return {
                "token_mint": lookup.token_mint,
                "pool_id": lookup.pool_id,
                "found": lookup.found,
                "source": lookup.source,
                "errors": lookup.errors,
            }

        @self.app.post("/api/liquidity/fee-preview")
        async def fee_preview(request: Request):
            body = await _json_body(request)
            amount_a = _require_int(body, "amount_a")
            amount_b = _require_int(body, "amount_b")
            return self.context.fees.quote(amount_a, amount_b)

        @self.app.get("/api/canary/status")
        async def canary_status():
            return self.context.canary.status()

        @self.app.post("/api/canary/check")
        async def canary_check(request: Request):
            body = await _json_body(request)
            owner = body.get("owner")
            if not owner or not isinstance(owner, str):
                raise ValidationError("owner is required", code="MissingOwner")
            side_a_ui = _optional_float(body, "side_a_ui")
            side_b_ui = _optional_float(body, "side_b_ui")

            mint_a, mint_b = _optional_str(body, "mint_a"), _optional_str(body, "mint_b")
            if mint_a and mint_b:
                await self.context.canary.enforce_caps(owner, mint_a, mint_b, side_a_ui, side_b_ui)
            else:
                self.context.canary.assert_allowed(owner, side_a_ui, side_b_ui)
            return {"allowed": True, "owner": owner}

        @self.app.post("/api/positions/save-tx")
        async def save_commit(request: Request):
            body = await _json_body(request)
            mint, txid = _optional_str(body, "mint"), _optional_str(body, "txid")
            if not mint or not txid:
                raise ValidationError("mint and txid are required", code="MissingFields")
            record = self.context.commits.save(
                mint,
                txid,
                whirlpool=_optional_str(body, "whirlpool"),
                tick_lower=_require_int(body, "tick_lower") if body.get("tick_lower") is not None else None,
                tick_upper=_require_int(body, "tick_upper") if body.get("tick_upper") is not None else None,
            )
            return {"ok": True, "mint": mint, "commit": asdict(record)}

        @self.app.get("/api/positions/last-commit")
        async def last_commit(mint: Optional[str] = None):
            if not mint:
                raise ValidationError("mint query parameter is required", code="MissingMint")
            record = self.context.commits.get(mint)
            return {"mint": mint, "commit": asdict(record) if record else None}

        @self.app.post("/api/meme/kit")
        async def meme_kit(request: Request):
            client_id = resolve_client_id(request, self.config.rate_limit_identifier_policy)
            set_client_context(client_id)
            kit_request = validate_kit_request(await _json_body(request))
            return await self.context.meme.generate(client_id, kit_request)

        @self.app.get("/api/admin/ai-usage")
        async def ai_usage(request: Request):
            self._require_admin(request)
            return self.context.meme.usage()

        @self.app.get("/api/admin/revenue")
        async def revenue(request: Request):
            self._require_admin(request)
            summary = self.context.ledger.revenue_summary()
            summary["recent"] = self.context.ledger.to_dicts()[-50:]
            return summary

        @self.app.post("/api/admin/skim-events")
        async def record_skim_event(request: Request):
            self._require_admin(request)
            body = await _json_body(request)
            mint, owner = _optional_str(body, "mint"), _optional_str(body, "owner")
            if not mint or not owner:
                raise ValidationError("mint and owner are required", code="MissingFields")

            quote = self.context.fees.quote(_require_int(body, "amount_a"), _require_int(body, "amount_b"))
            event = self.context.ledger.record(
                SkimEvent(
                    mint=mint,
                    owner=owner,
                    skim_a=quote["side_a"]["skim"],
                    skim_b=quote["side_b"]["skim"],
                    flat_fee_lamports=quote["flat_fee_lamports"] if body.get("include_flat_fee") else 0,
                    txid=_optional_str(body, "txid"),
                )
            )
            return {"recorded": True, "event": asdict(event), "quote": quote}


def create_app(config: Optional[ServiceConfig] = None):
    """Create FastAPI application."""
    service = LaunchpadService(config)
    return service.app


if __name__ == "__main__":
    service = LaunchpadService()
    service.run()
