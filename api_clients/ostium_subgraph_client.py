import logging
import requests
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

logger = logging.getLogger(__name__)

TRADES_BY_IDS_QUERY = """
    query GetTradesByIds($tradeIds: [String!]) {
        trades(where: { tradeID_in: $tradeIds }, first: 1000) {
            id
            tradeID
            tradeNotional
            notional
            timestamp
            isOpen
        }
    }
"""

TRADES_BY_TRADER_QUERY = """
    query GetTradesByTrader($trader: String!, $first: Int!, $lastId: String!) {
        trades(where: { trader: $trader, id_gt: $lastId }, first: $first, orderBy: id, orderDirection: asc) {
            id
            tradeID
            tradeNotional
            notional
            timestamp
            isOpen
        }
    }
"""


@dataclass(frozen=True)
class SubgraphTrade:
    trade_id: str
    notional: str
    trade_notional: Optional[str]
    timestamp: Optional[int]
    is_open: bool

    @classmethod
    def from_json(cls, raw: Dict[str, Any]) -> "SubgraphTrade":
        timestamp = raw.get('timestamp')
        try:
            timestamp = int(timestamp) if timestamp is not None else None
        except (TypeError, ValueError):
            timestamp = None
        return cls(
            trade_id=str(raw.get('tradeID')),
            notional=raw.get('notional') or '0',
            trade_notional=raw.get('tradeNotional'),
            timestamp=timestamp,
            is_open=bool(raw.get('isOpen')),
        )


class OstiumSubgraphClient:
    """Client for the Ostium trades subgraph (GraphQL over HTTP)."""

    def __init__(self, endpoint: str, timeout: int = 30, chunk_size: int = 100, page_size: int = 1000):
        """
        Args:
            endpoint: GraphQL endpoint URL
            timeout: Request timeout in seconds
            chunk_size: Trade ids per lookup query
            page_size: Trades per page for trader queries
        """
        self.endpoint = endpoint
        self.timeout = timeout
        self.chunk_size = chunk_size
        self.page_size = page_size
        self.session = requests.Session()
        self.session.headers.update({
            'Content-Type': 'application/json',
            'Accept': 'application/json',
        })

    def _query(self, query: str, variables: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Run one GraphQL query. Returns the `data` object, or None on HTTP,
        transport or GraphQL errors (all logged).
        """
        try:
            resp = self.session.post(
                self.endpoint,
                json={'query': query, 'variables': variables},
                timeout=self.timeout
            )
            resp.raise_for_status()
            body = resp.json()
        except requests.exceptions.RequestException as e:
            logger.error(f"Subgraph request to {self.endpoint} failed: {e}")
            return None
        except ValueError as e:
            logger.error(f"Failed to decode subgraph response from {self.endpoint}: {e}")
            return None

        if not isinstance(body, dict):
            logger.warning(f"Subgraph returned non-dict response: {type(body).__name__}")
            return None
        if body.get('errors'):
            error_msg = '; '.join(err.get('message', 'Unknown GraphQL error') for err in body['errors'])
            logger.error(f"Subgraph GraphQL errors: {error_msg}")
            return None
        return body.get('data') or {}

    def get_trades_by_ids(self, trade_ids: Sequence[str]) -> Dict[str, SubgraphTrade]:
        """
        Look up trades by Ostium trade id, in chunks. A failed chunk contributes
        nothing; the other chunks are still returned.
        """
        trades: Dict[str, SubgraphTrade] = {}
        ids = list(dict.fromkeys(str(t) for t in trade_ids if t))
        if not ids:
            return trades

        for start in range(0, len(ids), self.chunk_size):
            chunk = ids[start:start + self.chunk_size]
            data = self._query(TRADES_BY_IDS_QUERY, {'tradeIds': chunk})
            if data is None:
                logger.warning(f"Skipping {len(chunk)} trade ids after subgraph failure")
                continue
            for raw in data.get('trades') or []:
                trade = SubgraphTrade.from_json(raw)
                trades[trade.trade_id] = trade

        return trades

    def get_trades_by_trader(self, trader: str) -> List[SubgraphTrade]:
        """
        All trades of one trader address, paged by entity id (the subgraph caps
        `skip`, so offsets stop working on busy wallets). Any failure yields an
        empty list so a partially read history is never reported.
        """
        trades: List[SubgraphTrade] = []
        last_id = ''
        while True:
            data = self._query(
                TRADES_BY_TRADER_QUERY,
                {'trader': trader.lower(), 'first': self.page_size, 'lastId': last_id}
            )
            if data is None:
                return []
            page = data.get('trades') or []
            trades.extend(SubgraphTrade.from_json(raw) for raw in page)
            if len(page) < self.page_size:
                return trades
            next_id = page[-1].get('id')
            if not next_id or next_id <= last_id:
                logger.error(f"Subgraph cursor did not advance for trader {trader} (last id {last_id!r})")
                return []
            last_id = next_id
