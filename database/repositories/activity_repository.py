from typing import List, Dict, Any
from sqlalchemy import select
from database.models.activity import AuditLog, BillingEvent, TelegramUser, CtAccount, ResearchInstitute
from database.repositories.base_repository import BaseRepository

class ActivityRepository(BaseRepository[AuditLog]):
    """
    Repository for audit logs and the auxiliary tables the overview counts.
    """
    def __init__(self, engine):
        super().__init__(engine, model_class=AuditLog)

    def count_billing_events(self) -> int:
        return self.count(model=BillingEvent)

    def count_telegram_users(self) -> int:
        return self.count(model=TelegramUser)

    def count_ct_accounts(self) -> int:
        return self.count(model=CtAccount)

    def count_research_institutes(self) -> int:
        return self.count(model=ResearchInstitute)

    def get_recent_audit_logs(self, limit: int = 20) -> List[Dict[str, Any]]:
        """Latest audit log entries, newest first."""
        stmt = (
            select(AuditLog.event_name, AuditLog.subject_type, AuditLog.payload, AuditLog.occurred_at)
            .order_by(AuditLog.occurred_at.desc())
            .limit(limit)
        )
        return [
            {
                'event_name': event_name,
                'subject_type': subject_type,
                'payload': payload,
                'occurred_at': occurred_at,
            }
            for event_name, subject_type, payload, occurred_at in self.list(stmt)
        ]
