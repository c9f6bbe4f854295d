import uuid

from sqlalchemy import Uuid
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class TenantScopedBase(Base):
    """Abstract base for tenant-scoped tables. Adds an indexed tenant_id.

    Tenants themselves are owned by the identity service, so there is no
    foreign key here; RLS policies scope rows by ``app.current_tenant``.
    """

    __abstract__ = True

    tenant_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        nullable=False,
        index=True,
    )
