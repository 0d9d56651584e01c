from sqlalchemy.exc import SQLAlchemyError
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.audit_event_repository import IAuditEventRepository
from src.domain.entities import AuditEvent
from src.domain.exceptions import DirectoryUnavailable


class AuditEventRepository(IAuditEventRepository):
    """AuditEvent repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, audit_event: AuditEvent) -> AuditEvent:
        """Create a new audit event (immutable)"""
        self.session.add(audit_event)
        try:
            await self.session.flush()
            await self.session.refresh(audit_event)
        except SQLAlchemyError as exc:
            raise DirectoryUnavailable("writing audit event failed") from exc
        return audit_event
