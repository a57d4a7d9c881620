from __future__ import annotations

from ..extensions import db
from agenda.time_utils import to_utc_z


APPOINTMENT_CONFIRMED = "confirmed"
APPOINTMENT_CANCELLED = "cancelled"


class Appointment(db.Model):
    """
    A booked service for one customer with one staff member.

    end_at is the service end only. The post-service buffer in force at
    booking time is kept in buffer_after_minutes_snapshot, so later changes to
    buffer settings never alter historical occupancy.

    LIFECYCLE:
    - confirmed: created by the booking transaction, occupies time
    - cancelled: one-way soft delete; the row stays for history and no
      longer occupies time

    Appointments are never rescheduled in place (cancel + rebook instead).
    """
    __tablename__ = "appointments"
    __table_args__ = (
        db.CheckConstraint("end_at > start_at", name="ck_appointments_order"),
        db.CheckConstraint(
            "status IN ('confirmed', 'cancelled')", name="ck_appointments_status"
        ),
        db.Index("ix_appointments_staff_start", "store_id", "staff_id", "start_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    store_id = db.Column(db.Integer, db.ForeignKey("stores.id", ondelete="CASCADE"), nullable=False)
    staff_id = db.Column(db.Integer, db.ForeignKey("staff.id"), nullable=False, index=True)
    service_id = db.Column(db.Integer, db.ForeignKey("services.id", ondelete="SET NULL"), nullable=True)

    customer_name = db.Column(db.String(80), nullable=False)
    customer_phone = db.Column(db.String(40), nullable=False)

    start_at = db.Column(db.DateTime(timezone=True), nullable=False)
    end_at = db.Column(db.DateTime(timezone=True), nullable=False)
    buffer_after_minutes_snapshot = db.Column(db.Integer, nullable=False, default=0)

    status = db.Column(db.String(16), nullable=False, default=APPOINTMENT_CONFIRMED, index=True)
    cancelled_at = db.Column(db.DateTime(timezone=True), nullable=True)
    cancelled_reason = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    store = db.relationship(
        "Store",
        backref=db.backref("appointments", lazy=True, cascade="all, delete-orphan"),
    )
    staff = db.relationship("Staff", backref=db.backref("appointments", lazy=True))
    service = db.relationship("Service")

    @property
    def is_confirmed(self) -> bool:
        return self.status == APPOINTMENT_CONFIRMED

    def __repr__(self) -> str:
        return f"<Appointment id={self.id} staff_id={self.staff_id} start_at={self.start_at} status={self.status}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "store_id": self.store_id,
            "staff_id": self.staff_id,
            "service_id": self.service_id,
            "customer_name": self.customer_name,
            "customer_phone": self.customer_phone,
            "start_at": to_utc_z(self.start_at),
            "end_at": to_utc_z(self.end_at),
            "buffer_after_minutes": self.buffer_after_minutes_snapshot,
            "status": self.status,
            "cancelled_at": to_utc_z(self.cancelled_at),
            "cancelled_reason": self.cancelled_reason,
            "created_at": to_utc_z(self.created_at),
        }
