from sqlalchemy import Column, String, DateTime, ForeignKey
from database.models.base import Base

class Signal(Base):
    __tablename__ = 'signals'

    id = Column(String(36), primary_key=True)
    agent_id = Column(String(36), ForeignKey('agents.id'), nullable=False)
    venue = Column(String(50))
    created_at = Column(DateTime(timezone=True), nullable=False)
