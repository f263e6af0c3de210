from sqlalchemy import Column, String, Integer, DateTime, Text, ForeignKey
from sqlalchemy.orm import relationship
from licensing.database import Base
from licensing.utils.dates import utcnow


class StatusHistory(Base):
    __tablename__ = "application_status_history"

    id = Column(Integer, primary_key=True)
    application_id = Column(Integer, ForeignKey("position_applications.id", ondelete="CASCADE"), nullable=False, index=True)
    from_status = Column(Integer, nullable=True)
    to_status = Column(Integer, nullable=False)
    action = Column(String(50), nullable=False)
    actor_role = Column(String(50), nullable=False)
    actor_id = Column(Integer, nullable=True)
    comments = Column(Text, nullable=True)
    changed_at = Column(DateTime, default=utcnow, nullable=False)

    application = relationship("PositionApplication", back_populates="status_history")

    def to_dict(self):
        return {
            "from_status": self.from_status,
            "to_status": self.to_status,
            "action": self.action,
            "actor_role": self.actor_role,
            "actor_id": self.actor_id,
            "comments": self.comments,
            "changed_at": self.changed_at.isoformat() if self.changed_at else None,
        }
