from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from shortlink_app.database.connection import Base
from shortlink_app.models.user import utcnow


class ClickEvent(Base):
    """One recorded visit to a short link. Rows are never updated."""
    __tablename__ = "click_events"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    short_link_id = Column(
        Integer,
        ForeignKey("short_links.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    ip_address = Column(String(45), nullable=True)  # IPv6 fits in 45
    user_agent = Column(String(512), nullable=True)
    referer = Column(String(2048), nullable=True)
    country = Column(String(2), nullable=True)
    device_type = Column(String(20), nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)

    short_link = relationship("ShortLink", back_populates="clicks")

    __table_args__ = (
        Index("ix_click_events_link_created_at", "short_link_id", "created_at"),
    )
