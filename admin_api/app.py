import logging
from contextlib import asynccontextmanager
from typing import Mapping, Optional, Sequence

from fastapi import FastAPI

from admin_api.routes import router
from api_clients.multicall_client import MulticallBalanceReader, TokenConfig, tokens_from_config
from api_clients.ostium_subgraph_client import OstiumSubgraphClient
from api_clients.rpc_client import RpcClient
from analytics.trading_volume import MAINNET, TESTNET
from config import (
    ARBITRUM_RPC_URL,
    MULTICALL_CHUNK_SIZE,
    OSTIUM_SUBGRAPH_MAINNET_URL,
    OSTIUM_SUBGRAPH_TESTNET_URL,
    RPC_TIMEOUT,
    SUBGRAPH_CHUNK_SIZE,
    SUBGRAPH_TIMEOUT,
    TRACKED_TOKENS,
)
from database.db_utils import create_db_engine
from database.ledger import Ledger
from database.repositories.exceptions import DatabaseConnectionError

logger = logging.getLogger(__name__)


def create_app(
    ledger: Optional[Ledger] = None,
    balance_reader: Optional[MulticallBalanceReader] = None,
    subgraphs: Optional[Mapping[str, OstiumSubgraphClient]] = None,
    tokens: Optional[Sequence[TokenConfig]] = None,
) -> FastAPI:
    """
    Build the admin analytics application.

    Collaborators that are passed in are used as-is; anything missing is
    created at startup from config. Only an engine created here is disposed
    on shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        engine = None
        if ledger is None:
            engine = create_db_engine()
            if engine is None:
                raise DatabaseConnectionError("Could not connect to the database")
            app.state.ledger = Ledger(engine)
        else:
            app.state.ledger = ledger

        app.state.balance_reader = balance_reader or MulticallBalanceReader(
            RpcClient(ARBITRUM_RPC_URL, timeout=RPC_TIMEOUT),
            chunk_size=MULTICALL_CHUNK_SIZE,
        )
        app.state.subgraphs = dict(subgraphs) if subgraphs is not None else {
            MAINNET: OstiumSubgraphClient(OSTIUM_SUBGRAPH_MAINNET_URL, timeout=SUBGRAPH_TIMEOUT, chunk_size=SUBGRAPH_CHUNK_SIZE),
            TESTNET: OstiumSubgraphClient(OSTIUM_SUBGRAPH_TESTNET_URL, timeout=SUBGRAPH_TIMEOUT, chunk_size=SUBGRAPH_CHUNK_SIZE),
        }
        app.state.tokens = list(tokens) if tokens is not None else tokens_from_config(TRACKED_TOKENS)
        logger.info("✅ Admin analytics API ready")

        yield

        if engine is not None:
            engine.dispose()
            logger.info("Database engine disposed")

    app = FastAPI(title="Admin Analytics", lifespan=lifespan)
    app.include_router(router)
    return app
