from sqlalchemy import Column, String, Integer, DateTime, JSON
from sqlalchemy.sql import func
from database.models.base import Base

class AuditLog(Base):
    __tablename__ = 'audit_logs'

    id = Column(Integer, primary_key=True)
    event_name = Column(String(255), nullable=False)
    subject_type = Column(String(100))
    payload = Column(JSON)
    occurred_at = Column(DateTime(timezone=True), nullable=False)


# Tables the overview only counts.

class BillingEvent(Base):
    __tablename__ = 'billing_events'

    id = Column(String(36), primary_key=True)
    occurred_at = Column(DateTime(timezone=True), server_default=func.now())


class TelegramUser(Base):
    __tablename__ = 'telegram_users'

    id = Column(String(36), primary_key=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class CtAccount(Base):
    __tablename__ = 'ct_accounts'

    id = Column(String(36), primary_key=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class ResearchInstitute(Base):
    __tablename__ = 'research_institutes'

    id = Column(String(36), primary_key=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
