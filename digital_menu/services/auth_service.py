from datetime import datetime
from typing import Optional, Tuple
import logging
from sqlalchemy.orm import Session
from digital_menu.core.database import utcnow
from digital_menu.core.errors import InternalError, NotFound, Unauthenticated
from digital_menu.models.user import User
from digital_menu.services.email_service import EmailService
from digital_menu.services.session_store import SessionStore
from digital_menu.services.verification_code_store import VerificationCodeStore

logger = logging.getLogger(__name__)

PLACEHOLDER_COUNTRY = "Unknown"


def placeholder_name(email: str) -> str:
    """'jane.doe@example.com' -> 'Jane.doe'"""
    local_part = email.split("@")[0]
    return local_part[:1].upper() + local_part[1:]


class AuthService:
    """
    Passwordless authentication: email codes in, bearer sessions out.

    Every public method is one unit of work on the given database session;
    verification, user upsert and session creation either all commit or all
    roll back.
    """

    def __init__(
        self,
        db: Session,
        email_service: Optional[EmailService] = None,
        codes: Optional[VerificationCodeStore] = None,
        sessions: Optional[SessionStore] = None,
    ):
        self.db = db
        self.email_service = email_service or EmailService()
        self.codes = codes or VerificationCodeStore(db)
        self.sessions = sessions or SessionStore(db)

    async def send_verification_code(self, email: str) -> dict:
        """
        Issue a code for an email and hand it to the email service.

        The code is included in the result only when the email service did
        not actually send it.
        """
        verification = self.codes.create(email)
        self.db.commit()

        result = await self.email_service.send_verification_code(email, verification.code)

        if not result.get("success"):
            logger.error(f"Failed to send verification code to {email}: {result.get('error')}")
            raise InternalError("Failed to send verification code")

        response = {"success": True, "message": "Verification code sent"}
        if result.get("dev_mode"):
            response["code"] = verification.code
        return response

    def verify_and_register(self, email: str, code: str, name: str, country: str) -> Tuple[str, User]:
        try:
            self._consume_code(email, code)

            user = self.db.query(User).filter(User.email == email).first()
            if user:
                user.name = name
                user.country = country
            else:
                user = User(email=email, name=name, country=country)
                self.db.add(user)
                self.db.flush()

            session = self.sessions.create(user.id)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(user)
        logger.info(f"User {user.id} registered via {email}")
        return session.token, user

    def verify_and_login(self, email: str, code: str) -> Tuple[str, User]:
        try:
            self._consume_code(email, code)

            user = self.db.query(User).filter(User.email == email).first()
            if not user:
                # Login doubles as registration for unknown emails
                user = User(email=email, name=placeholder_name(email), country=PLACEHOLDER_COUNTRY)
                self.db.add(user)
                self.db.flush()
                logger.warning(f"Auto-provisioned user {user.id} on login for {email}")

            session = self.sessions.create(user.id)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(user)
        logger.info(f"User {user.id} logged in")
        return session.token, user

    def logout(self, token: Optional[str]) -> None:
        """Revoke a session token. Missing or unknown tokens are not an error."""
        if not token:
            return

        revoked = self.sessions.revoke(token)
        self.db.commit()
        logger.info(f"Logout revoked {revoked} session(s)")

    def get_current_user(self, user_id: str) -> User:
        user = self.db.query(User).filter(User.id == user_id).first()

        if not user:
            raise NotFound("User not found")

        return user

    def purge_expired(self, now: Optional[datetime] = None) -> dict:
        """Remove expired verification codes and sessions"""
        now = now or utcnow()
        try:
            codes = self.codes.purge_expired(now)
            sessions = self.sessions.purge_expired(now)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        return {"verification_codes": codes, "sessions": sessions}

    def _consume_code(self, email: str, code: str) -> None:
        if not self.codes.consume(email, code):
            logger.info(f"Rejected verification code for {email}")
            raise Unauthenticated("Invalid or expired verification code")
