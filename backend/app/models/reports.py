from __future__ import annotations

from ..extensions import db
from app.time_utils import to_iso_date, to_utc_z


REPORT_TYPES = ("daily", "weekly", "monthly", "custom", "profit_loss")


class Report(db.Model):
    """
    Point-in-time snapshot of aggregated figures.

    `data` is written once by reporting_service.generate_report and never
    recomputed. Reports are hard-deleted.
    """
    __tablename__ = "reports"
    __table_args__ = (
        db.Index("ix_reports_type_created", "report_type", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    report_type = db.Column(db.String(16), nullable=False)
    start_date = db.Column(db.Date, nullable=False)
    end_date = db.Column(db.Date, nullable=False)
    data = db.Column(db.JSON, nullable=False)
    file_path = db.Column(db.String(255), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    user = db.relationship("User", lazy="joined")

    def to_dict(self, *, with_user: bool = False) -> dict:
        data = {
            "id": self.id,
            "user_id": self.user_id,
            "report_type": self.report_type,
            "start_date": to_iso_date(self.start_date),
            "end_date": to_iso_date(self.end_date),
            "data": self.data,
            "file_path": self.file_path,
            "created_at": to_utc_z(self.created_at),
        }
        if with_user:
            data["user"] = self.user.to_dict() if self.user else None
        return data
