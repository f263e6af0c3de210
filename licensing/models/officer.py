# licensing/models/officer.py
from sqlalchemy import Column, String, Boolean, DateTime, Integer
from sqlalchemy.sql import func
from licensing.database import Base

class Officer(Base):
    __tablename__ = "officers"
    __table_args__ = {'comment': 'Municipal officers who act on applications'}

    id = Column(Integer, primary_key=True, index=True, comment='Unique identifier for the officer')
    full_name = Column(String(200), nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    phone = Column(String(20), nullable=True)
    password_hash = Column(String(255), nullable=False)

    # Role drives every workflow guard; see licensing.workflow.status.Role
    role = Column(String(50), nullable=False, index=True, comment='junior_engineer, assistant_engineer, executive_engineer, city_engineer, clerk')
    position_type = Column(Integer, nullable=True, comment='Position handled by Junior/Assistant Engineers')

    is_active = Column(Boolean, default=True)
    last_login = Column(DateTime(timezone=True), nullable=True, server_default=None)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now(), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<Officer {self.email} ({self.role})>"
