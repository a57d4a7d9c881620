from __future__ import annotations

from ..extensions import db
from agenda.time_utils import to_utc_z


class Store(db.Model):
    """
    Tenant root: every staff member, service, schedule, block and
    appointment belongs to exactly one store.

    The public slug is the store's address on the booking page. It is unique
    across the platform and never changes after creation.
    """
    __tablename__ = "stores"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    slug = db.Column(db.String(60), nullable=False, unique=True, index=True)
    name = db.Column(db.String(120), nullable=False)

    # IANA zone the store's civil calendar lives in (working hours, slot labels)
    timezone = db.Column(db.String(64), nullable=False, default="Europe/Lisbon")

    created_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
    )

    def __repr__(self) -> str:
        return f"<Store id={self.id} slug={self.slug!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "slug": self.slug,
            "name": self.name,
            "timezone": self.timezone,
            "created_at": to_utc_z(self.created_at),
        }

    def to_public_dict(self) -> dict:
        return {"slug": self.slug, "name": self.name}
