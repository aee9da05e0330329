import logging
from typing import List

from fastapi import Depends
from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from connecto.core.errors import Forbidden, NotFound, ValidationFailed
from connecto.models.group import Group, GroupMessage, room_for_group
from connecto.models.message import Message
from connecto.models.schemas import GroupMessageResponse, MessageContent, MessageResponse
from connecto.models.user import User, UserRole, VerificationStatus
from connecto.realtime.hub import NEW_GROUP_MESSAGE, NEW_MESSAGE, ConnectionHub, get_hub

logger = logging.getLogger(__name__)


def _require_content(content: MessageContent) -> None:
    if not (content.text or content.image or content.audio):
        raise ValidationFailed("Message must include text, an image or audio")


class MessagingService:
    """
    Direct and group messaging.

    Sends persist first and push second. The push goes through the hub and
    is best-effort; an offline recipient sees the message on their next fetch.
    """

    def __init__(self, hub: ConnectionHub):
        self.hub = hub

    def get_group(self, db: Session, group_id: int) -> Group:
        group = db.query(Group).filter(Group.id == group_id).first()
        if not group:
            raise NotFound("Group not found")
        return group

    async def send_direct(self, db: Session, sender: User, receiver_id: int, content: MessageContent) -> Message:
        _require_content(content)
        receiver = db.query(User).filter(User.id == receiver_id).first()
        if not receiver:
            raise NotFound("User not found")

        message = Message(
            sender_id=sender.id,
            receiver_id=receiver.id,
            text=content.text,
            image=content.image,
            audio=content.audio,
        )
        db.add(message)
        db.commit()
        db.refresh(message)

        payload = MessageResponse.model_validate(message).model_dump(mode="json", by_alias=True)
        await self.hub.emit_to_user(receiver.id, NEW_MESSAGE, payload)
        return message

    def get_conversation(self, db: Session, user_id: int, other_user_id: int) -> List[Message]:
        return db.query(Message).filter(
            or_(
                and_(Message.sender_id == user_id, Message.receiver_id == other_user_id),
                and_(Message.sender_id == other_user_id, Message.receiver_id == user_id),
            )
        ).order_by(Message.created_at, Message.id).all()

    async def send_group(self, db: Session, sender: User, group_id: int, content: MessageContent) -> GroupMessage:
        group = self.get_group(db, group_id)
        if sender not in group.members:
            raise Forbidden("You are not a member of this group")
        _require_content(content)

        message = GroupMessage(
            group_id=group.id,
            sender_id=sender.id,
            text=content.text,
            image=content.image,
            audio=content.audio,
        )
        db.add(message)
        db.commit()
        db.refresh(message)

        payload = GroupMessageResponse.model_validate(message).model_dump(mode="json", by_alias=True)
        delivered = await self.hub.emit_to_room(group.room, NEW_GROUP_MESSAGE, payload)
        logger.debug("Group %s message %s pushed to %d connections", group.id, message.id, delivered)
        return message

    def get_group_messages(self, db: Session, group_id: int) -> List[GroupMessage]:
        group = self.get_group(db, group_id)
        return db.query(GroupMessage).filter(
            GroupMessage.group_id == group.id
        ).order_by(GroupMessage.created_at, GroupMessage.id).all()

    async def join_group(self, db: Session, user: User, group_id: int) -> Group:
        """Add `user` to the group. Joining twice is a no-op."""
        group = self.get_group(db, group_id)
        if user in group.members:
            return group

        group.members.append(user)
        db.commit()
        db.refresh(group)

        # Only the currently active connection is subscribed
        await self.hub.subscribe(user.id, room_for_group(group.id))
        return group

    def list_groups(self, db: Session) -> List[Group]:
        return db.query(Group).order_by(Group.id).all()

    def member_group_ids(self, db: Session, user_id: int) -> List[int]:
        return [g.id for g in db.query(Group).filter(Group.members.any(User.id == user_id)).all()]

    def sidebar_users(self, db: Session, user: User) -> List[User]:
        """Verified professionals see the users they referred; everyone else sees other end users."""
        if UserRole(user.role).is_professional and user.status == VerificationStatus.VERIFIED:
            return db.query(User).filter(
                User.referred_by == user.id,
                User.role == UserRole.USER,
            ).order_by(User.id).all()
        return db.query(User).filter(
            User.id != user.id,
            User.role == UserRole.USER,
        ).order_by(User.id).all()

    def therapists(self, db: Session) -> List[User]:
        return db.query(User).filter(
            User.role == UserRole.THERAPIST,
            User.status == VerificationStatus.VERIFIED,
        ).order_by(User.id).all()


def get_messaging_service(hub: ConnectionHub = Depends(get_hub)) -> MessagingService:
    return MessagingService(hub)
