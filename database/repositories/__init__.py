from database.repositories.base_repository import BaseRepository
from database.repositories.agent_repository import AgentRepository
from database.repositories.deployment_repository import DeploymentRepository
from database.repositories.position_repository import PositionRepository
from database.repositories.signal_repository import SignalRepository
from database.repositories.user_address_repository import UserAddressRepository
from database.repositories.activity_repository import ActivityRepository

__all__ = [
    'BaseRepository',
    'AgentRepository',
    'DeploymentRepository',
    'PositionRepository',
    'SignalRepository',
    'UserAddressRepository',
    'ActivityRepository',
]
