from sqlalchemy import Column, Integer, String, DateTime, Boolean, ForeignKey, Index
from sqlalchemy.orm import relationship
from shortlink_app.database.connection import Base
from shortlink_app.models.user import utcnow


class ShortLink(Base):
    """
    A short code mapped to a target URL.

    click_count is a denormalized counter bumped on every redirect; the
    click_events table is the source of truth for analytics.
    """
    __tablename__ = "short_links"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    original_url = Column(String(2048), nullable=False)
    # Generated codes are 6 characters, custom codes up to 20
    short_code = Column(String(20), unique=True, nullable=False, index=True)
    title = Column(String(255), nullable=True)
    click_count = Column(Integer, default=0, nullable=False)
    last_clicked_at = Column(DateTime, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    expires_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    user = relationship("User", back_populates="links")
    clicks = relationship(
        "ClickEvent",
        back_populates="short_link",
        cascade="all, delete-orphan",
        order_by="ClickEvent.created_at",
    )

    __table_args__ = (
        Index("ix_short_links_user_id_created_at", "user_id", "created_at"),
    )
