from sqlalchemy import Column, String, DateTime
from database.models.base import Base

class UserAgentAddress(Base):
    __tablename__ = 'user_agent_addresses'

    user_wallet = Column(String(42), primary_key=True)
    hyperliquid_agent_address = Column(String(42))
    ostium_agent_address = Column(String(42))
    created_at = Column(DateTime(timezone=True), nullable=False)
