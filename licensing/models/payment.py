# licensing/models/payment.py
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, JSON, Index, text
from sqlalchemy.sql import func
from licensing.database import Base
import uuid

class Payment(Base):
    __tablename__ = "payments"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    application_id = Column(Integer, ForeignKey("position_applications.id", ondelete="CASCADE"), nullable=False, index=True)
    amount = Column(Integer, nullable=False)  # in Rupees
    status = Column(String(20), default="pending")  # pending, success, failed
    payment_reference = Column(String(100), unique=True, index=True, nullable=False)
    gateway_reference = Column(String(100), nullable=True, index=True)
    initiated_by = Column(String(50), nullable=True)  # applicant, system

    payment_metadata = Column(JSON, nullable=True)
    verification_data = Column(JSON, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    paid_at = Column(DateTime, nullable=True)

    # One successful payment per gateway transaction
    __table_args__ = (
        Index(
            "uq_payments_gateway_reference_success",
            "gateway_reference",
            unique=True,
            postgresql_where=text("status = 'success'"),
            sqlite_where=text("status = 'success'"),
        ),
    )

    def __repr__(self):
        return f"<Payment {self.payment_reference}: app={self.application_id} - ₹{self.amount}>"

    def to_dict(self, include_internal=False):
        """Convert to dictionary, optionally including raw gateway payloads"""
        data = {
            "id": self.id,
            "application_id": self.application_id,
            "amount": self.amount,
            "amount_display": f"₹{self.amount:,}",
            "status": self.status,
            "payment_reference": self.payment_reference,
            "gateway_reference": self.gateway_reference,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "paid_at": self.paid_at.isoformat() if self.paid_at else None,
        }

        if include_internal:
            data.update({
                "payment_metadata": self.payment_metadata,
                "verification_data": self.verification_data,
            })

        return data
