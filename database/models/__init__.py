from database.models.base import Base
from database.models.agent import Agent
from database.models.deployment import AgentDeployment
from database.models.position import Position
from database.models.signal import Signal
from database.models.user_agent_address import UserAgentAddress
from database.models.activity import (
    AuditLog,
    BillingEvent,
    TelegramUser,
    CtAccount,
    ResearchInstitute
)
