# licensing/models/appointment.py
from sqlalchemy import Column, String, Integer, Boolean, DateTime, Text, ForeignKey
from sqlalchemy.orm import relationship
from licensing.database import Base
from licensing.utils.dates import utcnow


class Appointment(Base):
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True, index=True)
    application_id = Column(Integer, ForeignKey("position_applications.id", ondelete="CASCADE"), nullable=False, index=True)
    scheduled_by = Column(Integer, nullable=False)  # JE officer id

    review_date = Column(DateTime, nullable=False)
    place = Column(String(200), nullable=False)
    contact_person = Column(String(200), nullable=False)
    room_number = Column(String(50), nullable=False)
    comments = Column(Text, nullable=True)

    # False once the JE completes document verification
    is_active = Column(Boolean, default=True, nullable=False)
    completed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    application = relationship("PositionApplication", back_populates="appointments")
    reschedules = relationship("AppointmentReschedule", back_populates="appointment",
                               cascade="all, delete-orphan", order_by="AppointmentReschedule.id")

    def to_dict(self):
        return {
            "id": self.id,
            "application_id": self.application_id,
            "review_date": self.review_date.isoformat(),
            "place": self.place,
            "contact_person": self.contact_person,
            "room_number": self.room_number,
            "comments": self.comments,
            "is_active": self.is_active,
            "reschedule_count": len(self.reschedules),
            "reschedules": [r.to_dict() for r in self.reschedules],
        }


class AppointmentReschedule(Base):
    __tablename__ = "appointment_reschedules"

    id = Column(Integer, primary_key=True)
    appointment_id = Column(Integer, ForeignKey("appointments.id", ondelete="CASCADE"), nullable=False, index=True)
    previous_review_date = Column(DateTime, nullable=False)
    new_review_date = Column(DateTime, nullable=False)
    reason = Column(Text, nullable=False)
    rescheduled_by = Column(Integer, nullable=False)
    rescheduled_at = Column(DateTime, default=utcnow, nullable=False)

    appointment = relationship("Appointment", back_populates="reschedules")

    def to_dict(self):
        return {
            "previous_review_date": self.previous_review_date.isoformat(),
            "new_review_date": self.new_review_date.isoformat(),
            "reason": self.reason,
            "rescheduled_at": self.rescheduled_at.isoformat() if self.rescheduled_at else None,
        }
