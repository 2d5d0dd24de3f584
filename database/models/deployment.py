from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from database.models.base import Base

class AgentDeployment(Base):
    __tablename__ = 'agent_deployments'

    id = Column(String(36), primary_key=True)
    agent_id = Column(String(36), ForeignKey('agents.id'), nullable=False)
    user_wallet = Column(String(42))
    safe_wallet = Column(String(42))
    status = Column(String(20))
    is_testnet = Column(Boolean, default=False)
    sub_started_at = Column(DateTime(timezone=True))

    agent = relationship("Agent", back_populates="deployments")
    positions = relationship("Position", back_populates="deployment")
