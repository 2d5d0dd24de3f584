from sqlalchemy import Column, String, Float, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from database.models.base import Base

class Agent(Base):
    __tablename__ = 'agents'

    id = Column(String(36), primary_key=True)
    name = Column(String(255), nullable=False)
    venue = Column(String(50))
    creator_wallet = Column(String(42))
    profit_receiver_address = Column(String(42))
    status = Column(String(20))
    apr_30d = Column(Float)
    apr_90d = Column(Float)
    sharpe_30d = Column(Float)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    deployments = relationship("AgentDeployment", back_populates="agent")
