import os
from dotenv import load_dotenv

# Load .env file only in development environment
if os.getenv("ENVIRONMENT", "development") == "development":
    load_dotenv()  # Load environment variables from .env file

# Database Configuration
DATABASE_URL = os.getenv("DATABASE_URL")
DB_HOST = os.getenv("DB_HOST")
DB_NAME = os.getenv("DB_NAME")
DB_USER = os.getenv("DB_USER")
DB_PASSWORD = os.getenv("DB_PASSWORD")
DB_PORT = os.getenv("DB_PORT")

# Chain RPC
ARBITRUM_RPC_URL = os.getenv("ARBITRUM_RPC_URL", "https://arb1.arbitrum.io/rpc")
RPC_TIMEOUT = int(os.getenv("RPC_TIMEOUT", "30"))
MULTICALL_CHUNK_SIZE = int(os.getenv("MULTICALL_CHUNK_SIZE", "500"))

# Ostium subgraphs
OSTIUM_SUBGRAPH_MAINNET_URL = os.getenv(
    "OSTIUM_SUBGRAPH_MAINNET_URL",
    "https://api.subgraph.ormilabs.com/api/public/67a599d5-c8d2-4cc4-9c4d-2975a97bc5d8/subgraphs/ost-prod/live/gn",
)
OSTIUM_SUBGRAPH_TESTNET_URL = os.getenv(
    "OSTIUM_SUBGRAPH_TESTNET_URL",
    "https://api.subgraph.ormilabs.com/api/public/67a599d5-c8d2-4cc4-9c4d-2975a97bc5d8/subgraphs/ost-sep/live/gn",
)
SUBGRAPH_TIMEOUT = int(os.getenv("SUBGRAPH_TIMEOUT", "30"))
SUBGRAPH_CHUNK_SIZE = int(os.getenv("SUBGRAPH_CHUNK_SIZE", "100"))
SUBGRAPH_MAX_CONCURRENCY = int(os.getenv("SUBGRAPH_MAX_CONCURRENCY", "8"))

# Dashboard windows
DASHBOARD_DAILY_DAYS = int(os.getenv("DASHBOARD_DAILY_DAYS", "30"))
ANALYTICS_WINDOW_DAYS = int(os.getenv("ANALYTICS_WINDOW_DAYS", "30"))
RECENT_ACTIVITY_LIMIT = int(os.getenv("RECENT_ACTIVITY_LIMIT", "20"))

# API server
API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("API_PORT", "8000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Tokens tracked on Arbitrum: (symbol, contract address, decimals)
TRACKED_TOKENS = [
    ("USDC", "0xaf88d065e77c8cC2239327C5EDb3A432268e5831", 6),
    ("USDT", "0xFd086bC7CD5C481DCC9C85ebE478A1C0b69FCbb9", 6),
    ("WETH", "0x82aF49447D8a07e3bd95BD0d56f35241523fBab1", 18),
    ("ARB", "0x912CE59144191C1204E64559FE8253a0e49E6548", 18),
]

VENUES = ["HYPERLIQUID", "OSTIUM", "GMX", "SPOT", "MULTI"]
AGENT_STATUSES = ["PUBLIC", "PRIVATE", "DRAFT"]
DEPLOYMENT_ACTIVE = "ACTIVE"
DEPLOYMENT_PAUSED = "PAUSED"
POSITION_OPEN = "OPEN"
