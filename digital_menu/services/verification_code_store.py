from datetime import datetime, timedelta
from typing import Optional
import logging
import secrets
from sqlalchemy.orm import Session
from digital_menu.core.config import settings
from digital_menu.core.database import utcnow
from digital_menu.models.verification_code import VerificationCode

logger = logging.getLogger(__name__)


class VerificationCodeStore:
    """Persistence for one-time email verification codes"""

    def __init__(self, db: Session, ttl_minutes: Optional[int] = None):
        self.db = db
        if ttl_minutes is None:
            ttl_minutes = settings.VERIFICATION_CODE_TTL_MINUTES
        self.ttl = timedelta(minutes=ttl_minutes)

    @staticmethod
    def generate_code() -> str:
        """Generate a 6-digit verification code, uniform over 100000-999999"""
        return str(100000 + secrets.randbelow(900000))

    def create(self, email: str, now: Optional[datetime] = None) -> VerificationCode:
        """
        Store a fresh code for an email.

        Older codes for the same email are left in place; they expire on their
        own and are removed by purge_expired.
        """
        now = now or utcnow()
        verification = VerificationCode(
            email=email,
            code=self.generate_code(),
            expires_at=now + self.ttl,
            created_at=now,
        )
        self.db.add(verification)
        self.db.flush()
        return verification

    def consume(self, email: str, code: str, now: Optional[datetime] = None) -> bool:
        """
        Atomically consume the most recent live code matching (email, code).

        The delete is conditional on the row still existing and being
        unexpired, so of two concurrent callers only the one whose delete
        affects a row succeeds. Returns False when nothing was consumed.
        The caller owns the surrounding transaction.
        """
        now = now or utcnow()
        candidate = self.db.query(VerificationCode.id, VerificationCode.created_at).filter(
            VerificationCode.email == email,
            VerificationCode.code == code,
            VerificationCode.expires_at > now
        ).order_by(VerificationCode.created_at.desc()).first()

        if candidate is None:
            return False

        deleted = self.db.query(VerificationCode).filter(
            VerificationCode.id == candidate.id,
            VerificationCode.expires_at > now
        ).delete(synchronize_session=False)

        if deleted != 1:
            return False

        # Codes issued earlier for this email are superseded
        self.db.query(VerificationCode).filter(
            VerificationCode.email == email,
            VerificationCode.created_at <= candidate.created_at
        ).delete(synchronize_session=False)

        return True

    def purge_expired(self, now: Optional[datetime] = None) -> int:
        """Delete every expired code. Returns the number of rows removed."""
        now = now or utcnow()
        deleted = self.db.query(VerificationCode).filter(
            VerificationCode.expires_at <= now
        ).delete(synchronize_session=False)
        logger.info(f"Purged {deleted} expired verification codes")
        return deleted
