import logging
from typing import Optional

from sqlalchemy.orm import Session

from connecto.core.errors import Forbidden, NotFound, Unauthorized, ValidationFailed
from connecto.core.security import hash_password, verify_password
from connecto.models.schemas import SignupRequest
from connecto.models.user import User, UserRole, VerificationStatus
from connecto.services.verification import VerificationAction, generate_referral_code, transition

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


class AccountService:

    def find_referrer(self, db: Session, referral_code: Optional[str]) -> Optional[User]:
        """Return the verified professional owning `referral_code`, if any."""
        if not referral_code:
            return None
        return db.query(User).filter(
            User.referral_code == referral_code,
            User.status == VerificationStatus.VERIFIED,
            User.role != UserRole.USER,
        ).first()

    def signup(self, db: Session, data: SignupRequest) -> User:
        """
        Create an account.

        End users must present a referral code from a verified professional
        and are verified on the spot. Professionals wait for an admin.
        """
        if not data.email or not data.password:
            raise ValidationFailed("Email and password are required")
        if not data.full_name:
            raise ValidationFailed("Full name is required")
        if len(data.password) < MIN_PASSWORD_LENGTH:
            raise ValidationFailed(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        if data.role == UserRole.ADMIN:
            raise Forbidden("You are not allowed to assign the admin role")

        referrer = None
        if data.role == UserRole.USER:
            if not data.referral_code:
                raise ValidationFailed("Referral code is required for users")
            referrer = self.find_referrer(db, data.referral_code)
            if not referrer:
                raise ValidationFailed("Invalid referral code")

        if db.query(User).filter(User.email == data.email).first():
            raise ValidationFailed("Email already exists")

        user = User(
            full_name=data.full_name,
            email=data.email,
            password=hash_password(data.password),
            role=data.role,
            status=VerificationStatus.UNVERIFIED,
        )
        if referrer:
            user.referred_by = referrer.id
            transition(user, VerificationAction.REFERRED_SIGNUP)
        else:
            transition(user, VerificationAction.PROFESSIONAL_SIGNUP)

        db.add(user)
        db.commit()
        db.refresh(user)
        logger.info("Signed up %s %s with status %s", user.role.value, user.id, user.status.value)
        return user

    def authenticate(self, db: Session, email: Optional[str], password: Optional[str]) -> User:
        if not email or not password:
            raise ValidationFailed("Please provide both email and password")
        user = db.query(User).filter(User.email == email).first()
        if not user or not verify_password(password, user.password):
            raise Unauthorized("Invalid credentials")
        return user

    def update_profile_pic(self, db: Session, user: User, profile_pic: Optional[str]) -> User:
        if not profile_pic:
            raise ValidationFailed("Profile pic is required")
        user.profile_pic = profile_pic
        db.commit()
        db.refresh(user)
        return user

    def validate_referral_code(self, db: Session, referral_code: Optional[str]) -> User:
        referrer = self.find_referrer(db, referral_code)
        if not referrer:
            raise ValidationFailed("Invalid referral code")
        return referrer

    def regenerate_referral_code(self, db: Session, user: User) -> str:
        if user.role == UserRole.USER:
            raise Forbidden("Only verified professionals can generate referral codes")
        if user.status != VerificationStatus.VERIFIED:
            raise Forbidden("Your account must be verified to generate referral codes")
        user.referral_code = generate_referral_code(user.role)
        db.commit()
        return user.referral_code

    def request_verification(self, db: Session, user_id: int, message: Optional[str]) -> User:
        if not message:
            raise ValidationFailed("Verification message is required")
        user = db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFound("User not found")
        if user.status == VerificationStatus.VERIFIED:
            raise ValidationFailed("User is already verified")
        if user.status == VerificationStatus.PENDING:
            raise ValidationFailed("Verification is already pending")
        transition(user, VerificationAction.REQUEST_REVIEW, message=message)
        db.commit()
        db.refresh(user)
        return user


account_service = AccountService()
