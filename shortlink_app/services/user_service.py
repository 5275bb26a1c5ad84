import hashlib
import logging
import secrets
from typing import Optional, Tuple

from sqlalchemy.orm import Session

from shortlink_app.exceptions import DuplicateUserError
from shortlink_app.models.user import User
from shortlink_app.schemas.user import UserCreate

logger = logging.getLogger(__name__)


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class UserService:
    """Registration and bearer-token lookup."""

    def __init__(self, db: Session):
        self.db = db

    def register(self, data: UserCreate) -> Tuple[User, str]:
        """
        Create a user and issue its API token.

        Returns:
            The new user and the raw token (only its hash is stored)

        Raises:
            DuplicateUserError: email already registered
        """
        email = str(data.email).lower()
        if self.db.query(User).filter(User.email == email).first():
            raise DuplicateUserError(f"User {email} already exists")

        token = secrets.token_urlsafe(32)
        user = User(email=email, name=data.name, api_token_hash=hash_token(token))
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)

        logger.info("Registered user %s", user.id)
        return user, token

    def get_by_token(self, token: Optional[str]) -> Optional[User]:
        if not token:
            return None
        return self.db.query(User).filter(User.api_token_hash == hash_token(token)).first()
