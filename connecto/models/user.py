import enum

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Boolean, Enum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from connecto.db.database import Base


class UserRole(str, enum.Enum):
    USER = "user"
    THERAPIST = "therapist"
    NGO = "ngo"
    VOLUNTEER = "volunteer"
    ADMIN = "admin"

    @property
    def is_professional(self) -> bool:
        return self in (UserRole.THERAPIST, UserRole.NGO, UserRole.VOLUNTEER)


class VerificationStatus(str, enum.Enum):
    UNVERIFIED = "unverified"
    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    full_name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password = Column(String(255), nullable=False)
    profile_pic = Column(String(500), default="")
    role = Column(Enum(UserRole, native_enum=False, values_callable=_enum_values, length=20),
                  default=UserRole.USER, nullable=False)
    status = Column(Enum(VerificationStatus, native_enum=False, values_callable=_enum_values, length=20),
                    default=VerificationStatus.UNVERIFIED, nullable=False)

    # Only professionals carry a code; end users link through referred_by
    referral_code = Column(String(50), unique=True, index=True, nullable=True)
    referred_by = Column(Integer, ForeignKey("users.id"), nullable=True)

    verification_request = Column(Boolean, default=False)
    verification_message = Column(Text, default="")
    # Set when a review was requested after signup, as opposed to a first-time pending professional
    resubmitted = Column(Boolean, default=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    referrer = relationship("User", remote_side=[id])
