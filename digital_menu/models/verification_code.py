from sqlalchemy import Column, String, DateTime, Index
from digital_menu.core.database import Base, utcnow
import uuid

class VerificationCode(Base):
    __tablename__ = "verification_codes"
    __table_args__ = (
        Index("ix_verification_codes_email_code", "email", "code"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String(255), nullable=False, index=True)
    code = Column(String(6), nullable=False)
    expires_at = Column(DateTime, nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    def __repr__(self):
        return f"<VerificationCode(email={self.email}, expires_at={self.expires_at})>"
