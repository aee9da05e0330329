from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from typing import List, Optional
from datetime import datetime

from connecto.models.user import UserRole, VerificationStatus


class CamelModel(BaseModel):
    """Base schema: snake_case in Python, camelCase on the wire."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


# User schemas
class SignupRequest(CamelModel):
    full_name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    role: UserRole = UserRole.USER
    referral_code: Optional[str] = None

class LoginRequest(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None

class UserSummary(CamelModel):
    id: int
    full_name: str
    email: str
    profile_pic: Optional[str] = ""
    role: UserRole
    status: VerificationStatus
    requires_verification: Optional[bool] = None

class UserResponse(CamelModel):
    id: int
    full_name: str
    email: str
    profile_pic: Optional[str] = ""
    role: UserRole
    status: VerificationStatus
    referral_code: Optional[str] = None
    referred_by: Optional[int] = None
    verification_request: bool = False
    verification_message: Optional[str] = ""
    resubmitted: bool = False
    created_at: Optional[datetime] = None

class UserBrief(CamelModel):
    id: int
    full_name: str
    profile_pic: Optional[str] = ""
    email: Optional[str] = None
    role: Optional[UserRole] = None

class ProfileUpdate(CamelModel):
    profile_pic: Optional[str] = None

class ReferralCodeRequest(CamelModel):
    referral_code: Optional[str] = None

class ReferralCodeResponse(CamelModel):
    referral_code: str

class ReferralValidation(CamelModel):
    valid: bool
    message: str

class VerificationRequestBody(CamelModel):
    message: Optional[str] = None

class ActionResponse(CamelModel):
    message: str
    referral_code: Optional[str] = None

# Message schemas
class MessageContent(CamelModel):
    text: Optional[str] = None
    image: Optional[str] = None
    audio: Optional[str] = None

class MessageResponse(CamelModel):
    id: int
    sender_id: int
    receiver_id: int
    text: Optional[str] = None
    image: Optional[str] = None
    audio: Optional[str] = None
    created_at: Optional[datetime] = None

# Group schemas
class GroupCreate(CamelModel):
    name: str
    type: str
    description: Optional[str] = ""

class GroupResponse(CamelModel):
    id: int
    name: str
    type: Optional[str] = None
    description: Optional[str] = ""
    created_by: int
    creator: UserBrief
    members: List[UserBrief] = []
    created_at: Optional[datetime] = None

class GroupMessageResponse(CamelModel):
    id: int
    group_id: int
    sender: UserBrief
    text: Optional[str] = None
    image: Optional[str] = None
    audio: Optional[str] = None
    created_at: Optional[datetime] = None

# Aura companion schemas
class AuraPart(CamelModel):
    text: str = ""
    img: Optional[str] = None
    audio: Optional[str] = None

class AuraMessageResponse(CamelModel):
    id: int
    role: str
    parts: List[AuraPart]
    created_at: Optional[datetime] = None

class ChatCreate(CamelModel):
    text: Optional[str] = None
    img: Optional[str] = None
    audio: Optional[str] = None

class ChatUpdate(CamelModel):
    question: Optional[str] = None
    img: Optional[str] = None
    audio: Optional[str] = None

class ChatSummary(CamelModel):
    id: int
    title: str

class ChatDetail(CamelModel):
    id: int
    title: str
    created_at: Optional[datetime] = None
    messages: List[AuraMessageResponse]

class ChatUpdateResponse(CamelModel):
    updated: bool
    ai_response: str

class GenerateRequest(CamelModel):
    prompt: Optional[str] = None

class GenerateResponse(CamelModel):
    response: str
    timestamp: datetime
