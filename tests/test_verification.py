import re

import pytest

from connecto.core.errors import InvalidTransition
from connecto.models.user import User, UserRole, VerificationStatus
from connecto.services.verification import (
    VerificationAction,
    generate_referral_code,
    next_status,
    transition,
)


def _user(role=UserRole.THERAPIST, status=VerificationStatus.UNVERIFIED, **extra):
    return User(full_name="Test", email="t@example.com", password="x", role=role, status=status, **extra)


def test_referred_signup_is_verified():
    user = transition(_user(role=UserRole.USER), VerificationAction.REFERRED_SIGNUP)
    assert user.status == VerificationStatus.VERIFIED


def test_professional_signup_is_pending():
    user = transition(_user(), VerificationAction.PROFESSIONAL_SIGNUP)
    assert user.status == VerificationStatus.PENDING
    assert not user.resubmitted


def test_approve_issues_referral_code():
    user = transition(_user(status=VerificationStatus.PENDING), VerificationAction.APPROVE)
    assert user.status == VerificationStatus.VERIFIED
    assert user.referral_code.startswith("THE-")


def test_reject_is_terminal():
    user = transition(_user(status=VerificationStatus.PENDING), VerificationAction.REJECT)
    assert user.status == VerificationStatus.REJECTED
    for action in VerificationAction:
        assert next_status(VerificationStatus.REJECTED, action) is None


def test_request_review_marks_resubmitted():
    user = _user(verification_request=False)
    transition(user, VerificationAction.REQUEST_REVIEW, message="Please review my licence")
    assert user.status == VerificationStatus.PENDING
    assert user.verification_request is True
    assert user.verification_message == "Please review my licence"
    assert user.resubmitted is True


def test_request_review_gated_by_open_request():
    user = _user(verification_request=True)
    with pytest.raises(InvalidTransition):
        transition(user, VerificationAction.REQUEST_REVIEW, message="again")
    assert user.status == VerificationStatus.UNVERIFIED


@pytest.mark.parametrize("status,action", [
    (VerificationStatus.VERIFIED, VerificationAction.APPROVE),
    (VerificationStatus.UNVERIFIED, VerificationAction.APPROVE),
    (VerificationStatus.VERIFIED, VerificationAction.REJECT),
    (VerificationStatus.REJECTED, VerificationAction.REQUEST_REVIEW),
    (VerificationStatus.PENDING, VerificationAction.REQUEST_REVIEW),
])
def test_invalid_transitions(status, action):
    user = _user(status=status)
    with pytest.raises(InvalidTransition) as exc_info:
        transition(user, action)
    assert exc_info.value.status_code == 400
    assert user.status == status


def test_referral_code_format():
    code = generate_referral_code(UserRole.VOLUNTEER)
    assert re.fullmatch(r"VOL-[0-9a-f]{6}-\d{4}", code)
