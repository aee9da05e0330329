from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from connecto.core.security import (
    clear_session_cookie,
    ensure_token_signing,
    get_current_user,
    set_session_cookie,
)
from connecto.db.database import get_db
from connecto.models.schemas import (
    ActionResponse,
    LoginRequest,
    ProfileUpdate,
    ReferralCodeRequest,
    ReferralCodeResponse,
    ReferralValidation,
    SignupRequest,
    UserResponse,
    UserSummary,
    VerificationRequestBody,
)
from connecto.models.user import User, UserRole, VerificationStatus
from connecto.services.account_service import account_service

router = APIRouter(
    prefix="/auth",
    tags=["auth"]
)


def _summary(user: User) -> UserSummary:
    summary = UserSummary.model_validate(user)
    summary.requires_verification = user.role != UserRole.USER and user.status == VerificationStatus.PENDING
    return summary


@router.post("/signup", response_model=UserSummary, status_code=status.HTTP_201_CREATED)
async def signup(data: SignupRequest, response: Response, db: Session = Depends(get_db)):
    """
    Create an account and start a session.

    End users need a referral code from a verified professional and are
    verified immediately; therapists, NGOs and volunteers start pending.
    """
    ensure_token_signing()
    user = account_service.signup(db, data)
    set_session_cookie(response, user.id)
    return _summary(user)


@router.post("/login", response_model=UserSummary)
async def login(data: LoginRequest, response: Response, db: Session = Depends(get_db)):
    user = account_service.authenticate(db, data.email, data.password)
    set_session_cookie(response, user.id)
    return _summary(user)


@router.post("/logout", response_model=ActionResponse)
async def logout(response: Response):
    clear_session_cookie(response)
    return ActionResponse(message="Logged out successfully")


@router.get("/check", response_model=UserResponse)
async def check_auth(current_user: User = Depends(get_current_user)):
    return current_user


@router.put("/update-profile", response_model=UserResponse)
async def update_profile(
    data: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Set the profile picture to an already-hosted image URL."""
    return account_service.update_profile_pic(db, current_user, data.profile_pic)


@router.post("/validate-referral", response_model=ReferralValidation)
async def validate_referral(data: ReferralCodeRequest, db: Session = Depends(get_db)):
    account_service.validate_referral_code(db, data.referral_code)
    return ReferralValidation(valid=True, message="Valid referral code")


@router.post("/generate-referral", response_model=ReferralCodeResponse)
async def generate_referral(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    code = account_service.regenerate_referral_code(db, current_user)
    return ReferralCodeResponse(referral_code=code)


@router.post("/request-verification", response_model=ActionResponse)
async def request_verification(
    data: VerificationRequestBody,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    account_service.request_verification(db, current_user.id, data.message)
    return ActionResponse(message="Verification request submitted successfully")
