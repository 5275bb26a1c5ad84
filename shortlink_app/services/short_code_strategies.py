"""
Short code generation strategies for the short link service.
Uses Strategy Pattern so random and user-chosen codes share one interface.
"""

import re
import secrets
import string
from abc import ABC, abstractmethod
from typing import Iterable, Optional
from sqlalchemy.orm import Session
from shortlink_app.exceptions import ShortCodeValidationError
from shortlink_app.models.short_link import ShortLink


def short_code_exists(db_session: Session, short_code: str) -> bool:
    return db_session.query(ShortLink.id).filter(
        ShortLink.short_code == short_code
    ).first() is not None


class ShortCodeStrategy(ABC):
    """Abstract base class for short code generation strategies"""

    @abstractmethod
    def generate(self, db_session: Session) -> str:
        """
        Produce a short code that is not yet used.

        Args:
            db_session: Database session used for the uniqueness check

        Returns:
            A short code string free at the time of the check
        """
        pass


class RandomShortCodeStrategy(ShortCodeStrategy):
    """
    Random alphanumeric codes from a cryptographically secure source.

    Collisions are re-drawn without a retry limit: 62^6 codes leave
    plenty of room for the expected volume.
    """

    CHARACTERS = string.ascii_letters + string.digits

    def __init__(self, length: int = 6):
        self.length = length

    def generate(self, db_session: Session) -> str:
        """Generate random short code with collision checking"""
        while True:
            short_code = self._generate_random_string()
            if not short_code_exists(db_session, short_code):
                return short_code

    def _generate_random_string(self) -> str:
        return ''.join(secrets.choice(self.CHARACTERS) for _ in range(self.length))


class CustomShortCodeStrategy(ShortCodeStrategy):
    """
    User-supplied code, validated instead of generated.

    A taken code is a validation error; it is never swapped for another.
    """

    def __init__(
        self,
        candidate: str,
        min_length: int = 3,
        max_length: int = 20,
        reserved: Optional[Iterable[str]] = None
    ):
        self.candidate = candidate
        self.pattern = re.compile(rf"^[A-Za-z0-9]{{{min_length},{max_length}}}$")
        self.min_length = min_length
        self.max_length = max_length
        self.reserved = {code.lower() for code in (reserved or [])}

    def generate(self, db_session: Session) -> str:
        if not self.pattern.match(self.candidate or ""):
            raise ShortCodeValidationError(
                f"Custom code must be {self.min_length}-{self.max_length} "
                f"letters or digits"
            )
        if self.candidate.lower() in self.reserved:
            raise ShortCodeValidationError(f"Custom code '{self.candidate}' is reserved")
        if short_code_exists(db_session, self.candidate):
            raise ShortCodeValidationError(f"Custom code '{self.candidate}' is already taken")
        return self.candidate
