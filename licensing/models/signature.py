from sqlalchemy import Column, String, Integer, DateTime, Text, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import timedelta

from licensing.config import settings
from licensing.database import Base
from licensing.utils.dates import utcnow


class SignatureSession(Base):
    __tablename__ = "signature_sessions"

    id = Column(Integer, primary_key=True)
    application_id = Column(Integer, ForeignKey("position_applications.id", ondelete="CASCADE"), nullable=False, index=True)
    signer_role = Column(String(50), nullable=False)
    signer_id = Column(Integer, nullable=False)
    stage_status = Column(Integer, nullable=False)
    target_document = Column(Integer, nullable=False)
    otp_hash = Column(String(64), nullable=False)
    expires_at = Column(DateTime, nullable=False,
                        default=lambda: utcnow() + timedelta(minutes=settings.SIGNATURE_OTP_EXPIRE_MINUTES))
    consumed_at = Column(DateTime, nullable=True)
    invalidated_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    def is_open(self, now=None) -> bool:
        now = now or utcnow()
        return self.consumed_at is None and self.invalidated_at is None and self.expires_at > now

    def __repr__(self):
        return f"<SignatureSession app={self.application_id} role={self.signer_role}>"


class DigitalSignature(Base):
    __tablename__ = "digital_signatures"
    __table_args__ = (
        UniqueConstraint("application_id", "stage_status", "submission_round",
                         name="uq_signature_per_stage_round"),
    )

    id = Column(Integer, primary_key=True)
    application_id = Column(Integer, ForeignKey("position_applications.id", ondelete="CASCADE"), nullable=False, index=True)
    session_id = Column(Integer, ForeignKey("signature_sessions.id"), nullable=False)
    signer_role = Column(String(50), nullable=False)
    signer_id = Column(Integer, nullable=False)
    stage_status = Column(Integer, nullable=False)
    submission_round = Column(Integer, nullable=False)
    target_document = Column(Integer, nullable=False)
    comments = Column(Text, nullable=True)
    signed_at = Column(DateTime, default=utcnow, nullable=False)

    application = relationship("PositionApplication", back_populates="signatures")

    def to_dict(self):
        return {
            "signer_role": self.signer_role,
            "signer_id": self.signer_id,
            "stage_status": self.stage_status,
            "target_document": self.target_document,
            "comments": self.comments,
            "signed_at": self.signed_at.isoformat() if self.signed_at else None,
        }
