from connecto.core.security import create_access_token, hash_password
from connecto.models.user import User, UserRole, VerificationStatus


class FakeProvider:
    """Records every upstream call and answers with a fixed reply."""

    def __init__(self, reply="You are doing great.", error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    async def generate_chat(self, messages, system_prompt=None):
        self.calls.append({"messages": messages, "system_prompt": system_prompt})
        if self.error:
            raise self.error
        return {"message": {"content": self.reply}}


def make_user(db, email, role=UserRole.USER, status=VerificationStatus.VERIFIED,
              full_name=None, password="secret123", **extra):
    user = User(
        full_name=full_name or email.split("@")[0].title(),
        email=email,
        password=hash_password(password),
        role=role,
        status=status,
        **extra,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def auth_headers(user):
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


def ws_url(user_id, token_user_id=None):
    """Socket URL for `user_id`, carrying a session token for `token_user_id` (defaults to the same user)."""
    token = create_access_token(user_id if token_user_id is None else token_user_id)
    return f"/ws?userId={user_id}&token={token}"
