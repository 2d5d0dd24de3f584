from typing import List, Optional, Any
from datetime import datetime
from decimal import Decimal
from sqlalchemy import select
from database.models.deployment import AgentDeployment
from database.models.position import Position
from database.repositories.base_repository import BaseRepository

class PositionRepository(BaseRepository[Position]):
    """
    Repository for Position entity operations.
    """
    def __init__(self, engine):
        super().__init__(engine, model_class=Position)

    def count_positions(
        self,
        status: Optional[str] = None,
        venue: Optional[str] = None,
        closed: Optional[bool] = None,
    ) -> int:
        criteria = []
        if status is not None:
            criteria.append(Position.status == status)
        if venue is not None:
            criteria.append(Position.venue == venue)
        if closed is True:
            criteria.append(Position.closed_at.is_not(None))
        elif closed is False:
            criteria.append(Position.closed_at.is_(None))
        return self.count(*criteria)

    def sum_pnl(self, closed_since: Optional[datetime] = None) -> Optional[Decimal]:
        """Realized PnL over all positions, or over positions closed since a cut-off."""
        criteria = [Position.pnl.is_not(None)]
        if closed_since is not None:
            criteria.append(Position.closed_at >= closed_since)
        return self.sum(Position.pnl, *criteria)

    def get_opened_since(self, since: datetime) -> List[datetime]:
        stmt = select(Position.opened_at).where(Position.opened_at >= since)
        return [row[0] for row in self.list(stmt)]

    def get_closed_pnl_since(self, since: datetime) -> List[Any]:
        """Returns (closed_at, pnl) for positions closed since the cut-off with a recorded PnL."""
        stmt = (
            select(Position.closed_at, Position.pnl)
            .where(Position.closed_at >= since, Position.pnl.is_not(None))
            .order_by(Position.closed_at.asc())
        )
        return self.list(stmt)

    def get_ostium_trade_positions(self) -> List[Any]:
        """
        Returns (id, ostium_trade_id, opened_at, is_testnet) for positions that
        carry an Ostium trade id, oldest first.
        """
        stmt = (
            select(
                Position.id,
                Position.ostium_trade_id,
                Position.opened_at,
                AgentDeployment.is_testnet,
            )
            .join(AgentDeployment, Position.deployment_id == AgentDeployment.id)
            .where(Position.ostium_trade_id.is_not(None))
            .order_by(Position.opened_at.asc())
        )
        return self.list(stmt)
