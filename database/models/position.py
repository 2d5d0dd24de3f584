from sqlalchemy import Column, String, NUMERIC, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from database.models.base import Base

class Position(Base):
    __tablename__ = 'positions'

    id = Column(String(36), primary_key=True)
    deployment_id = Column(String(36), ForeignKey('agent_deployments.id'), nullable=False)
    venue = Column(String(50))
    status = Column(String(20))
    pnl = Column(NUMERIC(20, 8))
    opened_at = Column(DateTime(timezone=True))
    closed_at = Column(DateTime(timezone=True))
    ostium_trade_id = Column(String(100))

    deployment = relationship("AgentDeployment", back_populates="positions")
