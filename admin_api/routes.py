"""
Read-only admin endpoints. Every handler recomputes its document per request;
a failure that escapes the guarded fetches becomes a 500 with an error message.
"""

import logging
from typing import Any, Awaitable, Dict, Optional

from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse

from analytics.agent_analytics import build_agent_analytics
from analytics.dashboard_stats import build_dashboard_stats
from analytics.onboarding import build_onboarded_users
from analytics.trading_volume import MAINNET, build_trading_volume, build_wallet_trading_volume
from analytics.wallet_balances import build_wallet_balances

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"])


async def _respond(label: str, document: Awaitable[Dict[str, Any]], headers: Optional[Dict[str, str]] = None) -> JSONResponse:
    try:
        content = await document
        # JSONResponse renders in its constructor; NaN raises here
        return JSONResponse(content, headers=headers)
    except Exception as e:
        logger.error(f"❌ [{label}] Error: {e}", exc_info=True)
        return JSONResponse({"error": str(e) or f"Failed to fetch {label.lower()}"}, status_code=500)


@router.get("/dashboard-stats")
async def dashboard_stats(request: Request):
    state = request.app.state
    return await _respond("Dashboard Stats", build_dashboard_stats(state.ledger, state.balance_reader))


@router.get("/agent-analytics")
async def agent_analytics(request: Request):
    return await _respond("Agent Analytics", build_agent_analytics(request.app.state.ledger))


@router.get("/trading-volume")
async def trading_volume(request: Request):
    state = request.app.state
    return await _respond("Trading Volume", build_trading_volume(state.ledger, state.subgraphs))


@router.get("/trading-volume/wallets")
async def wallet_trading_volume(request: Request, network: str = Query(MAINNET, pattern="^(mainnet|testnet)$")):
    state = request.app.state
    return await _respond(
        "Wallet Trading Volume",
        build_wallet_trading_volume(state.ledger, state.subgraphs[network]),
    )


@router.get("/onboarded-users")
async def onboarded_users(request: Request):
    return await _respond("Onboarded Users", build_onboarded_users(request.app.state.ledger))


@router.get("/wallet-balances")
async def wallet_balances(request: Request):
    state = request.app.state
    return await _respond(
        "Wallet Balances",
        build_wallet_balances(state.ledger, state.balance_reader, state.tokens),
        headers={"Cache-Control": "private, max-age=30"},
    )
