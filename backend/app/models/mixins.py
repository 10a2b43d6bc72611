from __future__ import annotations

from ..extensions import db
from app.time_utils import utcnow


class SoftDeleteMixin:
    """
    Logical delete through a nullable `deleted_at` timestamp.

    Default reads go through `live_query()`, which hides deleted rows.
    Historical references (sale items -> product) still load through
    relationships.
    """
    deleted_at = db.Column(db.DateTime(timezone=True), nullable=True, index=True)

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def mark_deleted(self) -> None:
        if self.deleted_at is None:
            self.deleted_at = utcnow()

    @classmethod
    def live_query(cls):
        return db.session.query(cls).filter(cls.deleted_at.is_(None))
