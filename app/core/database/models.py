"""
Key-value table backing the local storage area.

Holds the mirrored collections (``app_users``, ``app_organizations``,
``app_orders``) and the persisted auth session (``auth_session``).
"""
from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database.base import Base, TimestampMixin


class StorageEntry(Base, TimestampMixin):
    __tablename__ = "local_storage"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)

    def __repr__(self) -> str:
        return f"<StorageEntry(key={self.key!r}, size={len(self.value)})>"
