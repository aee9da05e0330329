"""
Verification state machine for user accounts.

    unverified --referred_signup------> verified
    unverified --professional_signup--> pending
    pending    --approve--------------> verified   (issues a referral code)
    pending    --reject---------------> rejected   (terminal)
    unverified --request_review-------> pending    (marks the user resubmitted)

`transition` is the only place a user's status changes.
"""
import enum
import logging
import secrets
import time
from typing import Dict, Optional, Tuple

from connecto.core.errors import InvalidTransition
from connecto.models.user import User, UserRole, VerificationStatus

logger = logging.getLogger(__name__)


class VerificationAction(str, enum.Enum):
    REFERRED_SIGNUP = "referred_signup"
    PROFESSIONAL_SIGNUP = "professional_signup"
    APPROVE = "approve"
    REJECT = "reject"
    REQUEST_REVIEW = "request_review"


TRANSITIONS: Dict[Tuple[VerificationStatus, VerificationAction], VerificationStatus] = {
    (VerificationStatus.UNVERIFIED, VerificationAction.REFERRED_SIGNUP): VerificationStatus.VERIFIED,
    (VerificationStatus.UNVERIFIED, VerificationAction.PROFESSIONAL_SIGNUP): VerificationStatus.PENDING,
    (VerificationStatus.PENDING, VerificationAction.APPROVE): VerificationStatus.VERIFIED,
    (VerificationStatus.PENDING, VerificationAction.REJECT): VerificationStatus.REJECTED,
    (VerificationStatus.UNVERIFIED, VerificationAction.REQUEST_REVIEW): VerificationStatus.PENDING,
}


def generate_referral_code(role: UserRole) -> str:
    """Role prefix, random hex and the tail of the millisecond clock, e.g. `THE-3fa9c1-4821`."""
    prefix = role.value[:3].upper()
    suffix = str(int(time.time() * 1000))[-4:]
    return f"{prefix}-{secrets.token_hex(3)}-{suffix}"


def next_status(current: VerificationStatus, action: VerificationAction) -> Optional[VerificationStatus]:
    return TRANSITIONS.get((current, action))


def transition(user: User, action: VerificationAction, message: Optional[str] = None) -> User:
    """
    Apply `action` to `user` in place and return it.

    Args:
        user: The account to move. Not committed here.
        action: The verification action being performed.
        message: Free-text note, only used by REQUEST_REVIEW.

    Raises:
        InvalidTransition: If the action is not allowed from the current status.
    """
    current = VerificationStatus(user.status or VerificationStatus.UNVERIFIED)
    target = next_status(current, action)
    if target is None:
        raise InvalidTransition(current, action)

    if action == VerificationAction.REQUEST_REVIEW:
        if user.verification_request:
            raise InvalidTransition(current, action, "Verification is already pending")
        user.verification_request = True
        user.verification_message = message or ""
        user.resubmitted = True
    elif action == VerificationAction.APPROVE:
        user.referral_code = generate_referral_code(UserRole(user.role))
        user.verification_request = False
    elif action == VerificationAction.REJECT:
        user.verification_request = False

    logger.info("User %s: %s --%s--> %s", user.id or user.email, current.value, action.value, target.value)
    user.status = target
    return user
