from typing import List, Optional, Dict, Any
from sqlalchemy import select
from sqlalchemy.orm import selectinload
from database.models.agent import Agent
from database.models.deployment import AgentDeployment
from database.repositories.base_repository import BaseRepository

class AgentRepository(BaseRepository[Agent]):
    """
    Repository for Agent entity operations.
    """
    def __init__(self, engine):
        super().__init__(engine, model_class=Agent)

    def count_agents(self, status: Optional[str] = None, venue: Optional[str] = None) -> int:
        criteria = []
        if status is not None:
            criteria.append(Agent.status == status)
        if venue is not None:
            criteria.append(Agent.venue == venue)
        return self.count(*criteria)

    def get_agents_with_activity(self) -> List[Dict[str, Any]]:
        """
        Bulk fetch of every agent with its deployments and their positions.

        Issues one query per relationship level regardless of how many agents
        exist. Agents are ordered by 30-day APR, best first.
        """
        stmt = (
            select(Agent)
            .options(selectinload(Agent.deployments).selectinload(AgentDeployment.positions))
            .order_by(Agent.apr_30d.desc().nulls_last())
        )
        with self.session() as session:
            agents = session.execute(stmt).scalars().all()
            return [
                {
                    'id': a.id,
                    'name': a.name,
                    'venue': a.venue,
                    'creator_wallet': a.creator_wallet,
                    'profit_receiver_address': a.profit_receiver_address,
                    'status': a.status,
                    'apr_30d': a.apr_30d,
                    'apr_90d': a.apr_90d,
                    'sharpe_30d': a.sharpe_30d,
                    'deployments': [
                        {
                            'id': d.id,
                            'status': d.status,
                            'positions': [{'status': p.status, 'pnl': p.pnl} for p in d.positions],
                        }
                        for d in a.deployments
                    ],
                }
                for a in agents
            ]

    def get_profit_receivers(self) -> List[Any]:
        """Returns (id, name, profit_receiver_address) for every agent."""
        stmt = select(Agent.id, Agent.name, Agent.profit_receiver_address)
        return self.list(stmt)
