# licensing/models/application.py
from sqlalchemy import Column, String, Integer, Boolean, Date, DateTime, Text, Numeric, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from licensing.database import Base
from licensing.workflow.status import ApplicationStatus


class PositionApplication(Base):
    __tablename__ = "position_applications"
    __table_args__ = {'comment': 'One licence application and its workflow position'}

    id = Column(Integer, primary_key=True, index=True)
    application_number = Column(String(20), unique=True, nullable=True, comment='Assigned on first submission')
    applicant_id = Column(Integer, ForeignKey("applicants.id", ondelete="CASCADE"), nullable=False, index=True)
    position_type = Column(Integer, nullable=False, index=True)

    # SECTION A: Workflow state
    status = Column(Integer, nullable=False, default=int(ApplicationStatus.DRAFT), index=True)
    version = Column(Integer, nullable=False, default=1)
    submission_round = Column(Integer, nullable=False, default=0)
    submitted_at = Column(DateTime, nullable=True)
    approved_at = Column(DateTime, nullable=True)
    remarks = Column(Text, nullable=True)

    # SECTION B: Personal Information
    first_name = Column(String(100), nullable=True)
    middle_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    mother_name = Column(String(100), nullable=True)
    email = Column(String(255), nullable=True)
    mobile_number = Column(String(20), nullable=True)
    gender = Column(String(10), nullable=True)
    date_of_birth = Column(Date, nullable=True)
    blood_group = Column(String(10), nullable=True)
    height = Column(Numeric(5, 2), nullable=True)

    # SECTION C: Identity numbers
    pan_number = Column(String(10), nullable=True)
    aadhar_number = Column(String(12), nullable=True)
    coa_number = Column(String(50), nullable=True)
    permanent_same_as_local = Column(Boolean, default=False, nullable=False)

    # SECTION D: Payment
    fee_amount = Column(Integer, nullable=False, default=0)
    payment_completed = Column(Boolean, default=False, nullable=False)
    payment_completed_at = Column(DateTime, nullable=True)
    payment_reference = Column(String(100), nullable=True)
    payment_amount = Column(Integer, nullable=True)
    challan_number = Column(String(50), nullable=True)

    # SECTION E: Rejection (only the latest rejection is kept)
    rejection_stage = Column(Integer, nullable=True, comment='Status the application was in when rejected')
    rejected_by_role = Column(String(50), nullable=True)
    rejection_comments = Column(Text, nullable=True)
    rejected_at = Column(DateTime, nullable=True)

    # SECTION F: Certificate
    certificate_number = Column(String(50), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Optimistic lock: a concurrent writer that loaded an older version fails on flush
    __mapper_args__ = {"version_id_col": version}

    # Relationships
    applicant = relationship("Applicant", back_populates="applications")
    addresses = relationship("Address", back_populates="application", cascade="all, delete-orphan")
    qualifications = relationship("Qualification", back_populates="application", cascade="all, delete-orphan")
    experiences = relationship("Experience", back_populates="application", cascade="all, delete-orphan")
    documents = relationship("ApplicationDocument", back_populates="application", cascade="all, delete-orphan")
    appointments = relationship("Appointment", back_populates="application", cascade="all, delete-orphan",
                                order_by="Appointment.id")
    signatures = relationship("DigitalSignature", back_populates="application", cascade="all, delete-orphan",
                              order_by="DigitalSignature.id")
    status_history = relationship("StatusHistory", back_populates="application", cascade="all, delete-orphan",
                                  order_by="StatusHistory.id")
    certificate = relationship("Certificate", back_populates="application", uselist=False,
                               cascade="all, delete-orphan")

    @property
    def full_name(self) -> str:
        parts = [self.first_name, self.middle_name, self.last_name]
        return " ".join(p for p in parts if p)

    @property
    def active_appointment(self):
        for appointment in self.appointments:
            if appointment.is_active:
                return appointment
        return None

    @property
    def rejection_reason(self):
        if self.rejection_stage is None:
            return None
        return self.rejection_comments

    def get_address(self, address_type: str):
        for address in self.addresses:
            if address.address_type == address_type:
                return address
        if address_type == "permanent" and self.permanent_same_as_local:
            return self.get_address("local")
        return None

    def documents_of_type(self, document_type):
        return [d for d in self.documents if d.document_type == int(document_type)]

    def __repr__(self):
        return f"<PositionApplication {self.id} {self.application_number} status={self.status}>"


class Address(Base):
    __tablename__ = "application_addresses"

    id = Column(Integer, primary_key=True)
    application_id = Column(Integer, ForeignKey("position_applications.id", ondelete="CASCADE"), nullable=False, index=True)
    address_type = Column(String(20), nullable=False)  # local, permanent
    address_line1 = Column(String(500), nullable=False)
    address_line2 = Column(String(500), nullable=True)
    address_line3 = Column(String(500), nullable=True)
    city = Column(String(100), nullable=False)
    state = Column(String(100), nullable=False)
    country = Column(String(100), nullable=False, default="India")
    pin_code = Column(String(10), nullable=False)

    application = relationship("PositionApplication", back_populates="addresses")


class Qualification(Base):
    __tablename__ = "application_qualifications"

    id = Column(Integer, primary_key=True)
    application_id = Column(Integer, ForeignKey("position_applications.id", ondelete="CASCADE"), nullable=False, index=True)
    institute_name = Column(String(200), nullable=False)
    university_name = Column(String(200), nullable=False)
    specialization = Column(String(50), nullable=True)  # Diploma, BE, ME, PhD
    degree_name = Column(String(200), nullable=False)
    passing_month = Column(Integer, nullable=True)
    year_of_passing = Column(Integer, nullable=False)

    application = relationship("PositionApplication", back_populates="qualifications")


class Experience(Base):
    __tablename__ = "application_experiences"

    id = Column(Integer, primary_key=True)
    application_id = Column(Integer, ForeignKey("position_applications.id", ondelete="CASCADE"), nullable=False, index=True)
    company_name = Column(String(200), nullable=False)
    position = Column(String(200), nullable=False)
    from_date = Column(Date, nullable=False)
    to_date = Column(Date, nullable=False)

    application = relationship("PositionApplication", back_populates="experiences")

    @property
    def years_of_experience(self) -> float:
        return round((self.to_date - self.from_date).days / 365.25, 2)
