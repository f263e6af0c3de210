from sqlalchemy import Column, String, Integer, DateTime, Text, ForeignKey
from sqlalchemy.orm import relationship
from licensing.database import Base
from licensing.utils.dates import utcnow


class Certificate(Base):
    __tablename__ = "certificates"

    id = Column(Integer, primary_key=True, index=True)
    application_id = Column(Integer, ForeignKey("position_applications.id", ondelete="CASCADE"),
                            nullable=False, unique=True)
    certificate_number = Column(String(50), nullable=False, unique=True)
    status = Column(String(20), nullable=False, default="pending")  # pending, generated, failed
    file_path = Column(String(500), nullable=True)
    generated_at = Column(DateTime, nullable=True)
    error_message = Column(Text, nullable=True)
    requested_at = Column(DateTime, default=utcnow, nullable=False)

    application = relationship("PositionApplication", back_populates="certificate")

    def __repr__(self):
        return f"<Certificate {self.certificate_number} {self.status}>"
