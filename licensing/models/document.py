# licensing/models/document.py
from sqlalchemy import Column, String, Integer, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from licensing.database import Base
from licensing.utils.dates import utcnow


class ApplicationDocument(Base):
    __tablename__ = "application_documents"

    id = Column(Integer, primary_key=True, index=True)
    application_id = Column(Integer, ForeignKey("position_applications.id", ondelete="CASCADE"), nullable=False, index=True)
    document_type = Column(Integer, nullable=False)
    file_name = Column(String(255), nullable=False)
    file_size = Column(Integer, nullable=False, default=0)
    content_type = Column(String(100), nullable=True)
    # sha256 of the content; file lives at STORAGE_DIR/<handle[:2]>/<handle>
    storage_handle = Column(String(64), nullable=False)

    is_verified = Column(Boolean, default=False, nullable=False)
    verified_by = Column(Integer, nullable=True)
    verified_at = Column(DateTime, nullable=True)
    is_system_generated = Column(Boolean, default=False, nullable=False)
    uploaded_at = Column(DateTime, default=utcnow, nullable=False)

    application = relationship("PositionApplication", back_populates="documents")

    def to_dict(self):
        return {
            "id": self.id,
            "document_type": self.document_type,
            "file_name": self.file_name,
            "file_size": self.file_size,
            "storage_handle": self.storage_handle,
            "is_verified": self.is_verified,
            "is_system_generated": self.is_system_generated,
            "uploaded_at": self.uploaded_at.isoformat() if self.uploaded_at else None,
        }

    def __repr__(self):
        return f"<ApplicationDocument {self.id} type={self.document_type} app={self.application_id}>"
