"""
Database models for the short link service.

Click analytics live in the same relational store as the links they belong to,
so deleting a link cascades to its click events.
"""

from .user import User
from .short_link import ShortLink
from .click_event import ClickEvent

__all__ = ["User", "ShortLink", "ClickEvent"]
