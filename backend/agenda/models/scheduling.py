from __future__ import annotations

from ..extensions import db
from agenda.time_utils import to_utc_z


class WorkingHourRule(db.Model):
    """
    One shift of a staff member's recurring weekly schedule.

    KEY: (staff_id, day_of_week, slot). slot is the shift's ordinal within the
    day (1 = morning, 2 = afternoon, ...). A day may have any number of shifts;
    open shifts never overlap and are ordered by slot.

    Times are store-local civil times. Absence of rows means closed: no
    default schedule is ever assumed.
    """
    __tablename__ = "staff_working_hours"
    __table_args__ = (
        db.UniqueConstraint("staff_id", "day_of_week", "slot", name="uq_working_hours_staff_day_slot"),
        db.CheckConstraint("day_of_week >= 0 AND day_of_week <= 6", name="ck_working_hours_day"),
        db.CheckConstraint("slot >= 1", name="ck_working_hours_slot"),
        db.Index("ix_working_hours_staff_day", "staff_id", "day_of_week"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    store_id = db.Column(db.Integer, db.ForeignKey("stores.id", ondelete="CASCADE"), nullable=False, index=True)
    staff_id = db.Column(db.Integer, db.ForeignKey("staff.id", ondelete="CASCADE"), nullable=False)

    day_of_week = db.Column(db.Integer, nullable=False)  # 0=Monday, 6=Sunday
    slot = db.Column(db.Integer, nullable=False, default=1)
    is_open = db.Column(db.Boolean, nullable=False, default=True)
    start_time = db.Column(db.Time, nullable=True)
    end_time = db.Column(db.Time, nullable=True)

    staff = db.relationship(
        "Staff",
        backref=db.backref("working_hours", lazy=True, cascade="all, delete-orphan"),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "staff_id": self.staff_id,
            "day_of_week": self.day_of_week,
            "slot": self.slot,
            "is_open": self.is_open,
            "start": self.start_time.strftime("%H:%M") if self.start_time else None,
            "end": self.end_time.strftime("%H:%M") if self.end_time else None,
        }


class AvailabilityBlock(db.Model):
    """
    Ad-hoc unavailability (vacation, closure, training).

    staff_id NULL blocks the whole store; otherwise only that staff member.
    Stored as absolute instants, independent of the weekly schedule.
    """
    __tablename__ = "availability_blocks"
    __table_args__ = (
        db.CheckConstraint("end_at > start_at", name="ck_availability_blocks_order"),
        db.Index("ix_availability_blocks_store_range", "store_id", "start_at", "end_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    store_id = db.Column(db.Integer, db.ForeignKey("stores.id", ondelete="CASCADE"), nullable=False)
    staff_id = db.Column(db.Integer, db.ForeignKey("staff.id", ondelete="CASCADE"), nullable=True, index=True)

    start_at = db.Column(db.DateTime(timezone=True), nullable=False)
    end_at = db.Column(db.DateTime(timezone=True), nullable=False)
    reason = db.Column(db.String(200), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    store = db.relationship(
        "Store",
        backref=db.backref("availability_blocks", lazy=True, cascade="all, delete-orphan"),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "store_id": self.store_id,
            "staff_id": self.staff_id,
            "start_at": to_utc_z(self.start_at),
            "end_at": to_utc_z(self.end_at),
            "reason": self.reason,
            "created_at": to_utc_z(self.created_at),
        }
