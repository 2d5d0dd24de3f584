from typing import List, Optional, Any
from datetime import datetime
from sqlalchemy import select, and_
from database.models.agent import Agent
from database.models.deployment import AgentDeployment
from database.repositories.base_repository import BaseRepository

class DeploymentRepository(BaseRepository[AgentDeployment]):
    """
    Repository for AgentDeployment (subscription) operations.
    """
    def __init__(self, engine):
        super().__init__(engine, model_class=AgentDeployment)

    def count_deployments(
        self,
        status: Optional[str] = None,
        venue: Optional[str] = None,
        started_before: Optional[datetime] = None,
    ) -> int:
        """
        Count deployments, optionally by status, by the venue of their agent,
        or started strictly before a cut-off.
        """
        criteria = []
        if status is not None:
            criteria.append(AgentDeployment.status == status)
        if venue is not None:
            criteria.append(AgentDeployment.agent.has(Agent.venue == venue))
        if started_before is not None:
            criteria.append(AgentDeployment.sub_started_at < started_before)
        return self.count(*criteria)

    def get_deployment_starts(self, since: datetime) -> List[datetime]:
        stmt = (
            select(AgentDeployment.sub_started_at)
            .where(AgentDeployment.sub_started_at >= since)
            .order_by(AgentDeployment.sub_started_at.asc())
        )
        return [row[0] for row in self.list(stmt)]

    def get_safe_wallets(self) -> List[Any]:
        """Returns (id, agent_id, user_wallet, safe_wallet) for deployments with a safe wallet."""
        stmt = select(
            AgentDeployment.id,
            AgentDeployment.agent_id,
            AgentDeployment.user_wallet,
            AgentDeployment.safe_wallet,
        ).where(and_(AgentDeployment.safe_wallet.is_not(None), AgentDeployment.safe_wallet != ''))
        return self.list(stmt)
