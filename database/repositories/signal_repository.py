from typing import List, Optional, Dict, Any
from datetime import datetime
from sqlalchemy import select, func
from database.models.signal import Signal
from database.repositories.base_repository import BaseRepository

class SignalRepository(BaseRepository[Signal]):
    """
    Repository for trading signal operations.
    """
    def __init__(self, engine):
        super().__init__(engine, model_class=Signal)

    def count_signals(self, since: Optional[datetime] = None) -> int:
        if since is None:
            return self.count()
        return self.count(Signal.created_at >= since)

    def get_signals_since(self, since: datetime) -> List[Any]:
        """Returns (created_at, venue) for signals created since the cut-off."""
        stmt = (
            select(Signal.created_at, Signal.venue)
            .where(Signal.created_at >= since)
            .order_by(Signal.created_at.asc())
        )
        return self.list(stmt)

    def count_by_agent(self) -> Dict[str, int]:
        stmt = select(Signal.agent_id, func.count()).group_by(Signal.agent_id)
        return {agent_id: int(n) for agent_id, n in self.list(stmt)}
