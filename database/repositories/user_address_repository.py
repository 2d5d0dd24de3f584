from typing import List, Any
from sqlalchemy import select
from database.models.user_agent_address import UserAgentAddress
from database.repositories.base_repository import BaseRepository

class UserAddressRepository(BaseRepository[UserAgentAddress]):
    """
    Repository for the per-user venue agent addresses (onboarding records).
    """
    def __init__(self, engine):
        super().__init__(engine, model_class=UserAgentAddress)

    def get_onboarded_users(self) -> List[Any]:
        """Returns (created_at, hyperliquid_agent_address, ostium_agent_address), oldest first."""
        stmt = select(
            UserAgentAddress.created_at,
            UserAgentAddress.hyperliquid_agent_address,
            UserAgentAddress.ostium_agent_address,
        ).order_by(UserAgentAddress.created_at.asc())
        return self.list(stmt)

    def get_agent_addresses(self) -> List[Any]:
        """Returns (user_wallet, hyperliquid_agent_address, ostium_agent_address)."""
        stmt = select(
            UserAgentAddress.user_wallet,
            UserAgentAddress.hyperliquid_agent_address,
            UserAgentAddress.ostium_agent_address,
        )
        return self.list(stmt)

    def get_ostium_agent_addresses(self) -> List[Any]:
        """Returns (user_wallet, ostium_agent_address) for users onboarded on Ostium."""
        stmt = select(
            UserAgentAddress.user_wallet,
            UserAgentAddress.ostium_agent_address,
        ).where(UserAgentAddress.ostium_agent_address.is_not(None), UserAgentAddress.ostium_agent_address != '')
        return self.list(stmt)
