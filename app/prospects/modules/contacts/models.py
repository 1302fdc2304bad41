from __future__ import annotations

import uuid
from datetime import date, datetime, timezone

from sqlalchemy import Boolean, Date, DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.prospects.constants import DEFAULT_STATUS
from app.prospects.models import Base


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Contact(Base):
    __tablename__ = "contacts"
    __table_args__ = (
        Index("idx_contacts_created_at", "created_at"),
        Index("idx_contacts_status", "status"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)

    name: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default=DEFAULT_STATUS)

    initial_touchpoint: Mapped[date | None] = mapped_column(Date, nullable=True)
    last_touchpoint: Mapped[date | None] = mapped_column(Date, nullable=True)
    next_follow_up: Mapped[date | None] = mapped_column(Date, nullable=True)

    temperature: Mapped[str | None] = mapped_column(String(16), nullable=True)  # Hot/Warm/Lukewarm/Cold
    proposal_sent: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    brief: Mapped[str | None] = mapped_column(Text, nullable=True)  # markdown
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)  # markdown

    phone: Mapped[str | None] = mapped_column(String(32), nullable=True)  # (XXX) XXX-XXXX
    email: Mapped[str | None] = mapped_column(Text, nullable=True)

    referral_source: Mapped[str | None] = mapped_column(Text, nullable=True)
    referral_type: Mapped[str | None] = mapped_column(String(16), nullable=True)
    good_fit: Mapped[str | None] = mapped_column(String(8), nullable=True)

    def to_dict(self) -> dict:
        def _iso(v: date | datetime | None) -> str | None:
            return v.isoformat() if v is not None else None

        return {
            "id": self.id,
            "created_at": _iso(self.created_at),
            "status": self.status,
            "name": self.name,
            "initial_touchpoint": _iso(self.initial_touchpoint),
            "last_touchpoint": _iso(self.last_touchpoint),
            "next_follow_up": _iso(self.next_follow_up),
            "temperature": self.temperature,
            "proposal_sent": bool(self.proposal_sent),
            "brief": self.brief,
            "phone": self.phone,
            "email": self.email,
            "referral_source": self.referral_source,
            "referral_type": self.referral_type,
            "good_fit": self.good_fit,
            "notes": self.notes,
        }
