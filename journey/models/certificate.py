"""Certificate model."""

from sqlalchemy import Column, String, Integer, DateTime, UniqueConstraint

from journey.core.database import Base, utcnow


class Certificate(Base):
    """Issued at most once per (user, course); never deleted."""
    __tablename__ = "certificates"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(64), nullable=False, index=True)
    course_id = Column(String(64), nullable=False)
    issued_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        UniqueConstraint("user_id", "course_id", name="uq_certificates_user_course"),
    )
