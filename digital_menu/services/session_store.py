from datetime import datetime, timedelta
from typing import Optional
import logging
import secrets
from sqlalchemy.orm import Session
from digital_menu.core.config import settings
from digital_menu.core.database import utcnow
from digital_menu.models.session import UserSession

logger = logging.getLogger(__name__)


class SessionStore:
    """Persistence for bearer-token sessions"""

    def __init__(self, db: Session, ttl_days: Optional[int] = None):
        self.db = db
        if ttl_days is None:
            ttl_days = settings.SESSION_TTL_DAYS
        self.ttl = timedelta(days=ttl_days)

    @staticmethod
    def generate_token() -> str:
        """256 random bits, hex encoded"""
        return secrets.token_hex(32)

    def create(self, user_id: str, now: Optional[datetime] = None) -> UserSession:
        now = now or utcnow()
        session = UserSession(
            user_id=user_id,
            token=self.generate_token(),
            expires_at=now + self.ttl,
            created_at=now,
        )
        self.db.add(session)
        self.db.flush()
        return session

    def find_valid(self, token: str, now: Optional[datetime] = None) -> Optional[UserSession]:
        """Return the session for a token if it exists and has not expired"""
        now = now or utcnow()
        session = self.db.query(UserSession).filter(UserSession.token == token).first()

        if session is None or session.expires_at <= now:
            return None

        return session

    def revoke(self, token: str) -> int:
        """Delete every session carrying this token. Unknown tokens are a no-op."""
        return self.db.query(UserSession).filter(
            UserSession.token == token
        ).delete(synchronize_session=False)

    def purge_expired(self, now: Optional[datetime] = None) -> int:
        now = now or utcnow()
        deleted = self.db.query(UserSession).filter(
            UserSession.expires_at <= now
        ).delete(synchronize_session=False)
        logger.info(f"Purged {deleted} expired sessions")
        return deleted
