import logging
from typing import List

from sqlalchemy import or_
from sqlalchemy.orm import Session

from connecto.core.errors import Forbidden, NotFound
from connecto.models.aura import AuraChat
from connecto.models.group import Group, GroupMessage, group_members
from connecto.models.message import Message
from connecto.models.schemas import GroupCreate
from connecto.models.user import User, UserRole, VerificationStatus
from connecto.services.verification import VerificationAction, transition

logger = logging.getLogger(__name__)


class AdminService:

    def _get_user(self, db: Session, user_id: int) -> User:
        user = db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFound("User not found")
        return user

    def pending_users(self, db: Session) -> List[User]:
        return db.query(User).filter(
            User.role.notin_([UserRole.USER, UserRole.ADMIN]),
            User.status == VerificationStatus.PENDING,
        ).order_by(User.id).all()

    def all_users(self, db: Session) -> List[User]:
        return db.query(User).order_by(User.id).all()

    def verify_user(self, db: Session, user_id: int) -> User:
        user = self._get_user(db, user_id)
        transition(user, VerificationAction.APPROVE)
        db.commit()
        db.refresh(user)
        return user

    def reject_user(self, db: Session, user_id: int) -> User:
        user = self._get_user(db, user_id)
        transition(user, VerificationAction.REJECT)
        db.commit()
        db.refresh(user)
        return user

    def create_group(self, db: Session, admin: User, data: GroupCreate) -> Group:
        group = Group(
            name=data.name,
            type=data.type,
            description=data.description or "",
            created_by=admin.id,
        )
        group.members.append(admin)
        db.add(group)
        db.commit()
        db.refresh(group)
        logger.info("Admin %s created group %s (%s)", admin.id, group.id, group.name)
        return group

    def list_groups(self, db: Session) -> List[Group]:
        return db.query(Group).order_by(Group.id).all()

    def delete_user(self, db: Session, user_id: int) -> None:
        """
        Hard-delete a user and what hangs off them.

        Each step commits on its own; a failure part-way leaves the earlier
        steps applied.
        """
        user = self._get_user(db, user_id)
        if user.role == UserRole.ADMIN:
            raise Forbidden("Admin users cannot be deleted")

        db.query(Message).filter(
            or_(Message.sender_id == user_id, Message.receiver_id == user_id)
        ).delete(synchronize_session=False)
        db.commit()

        db.query(GroupMessage).filter(GroupMessage.sender_id == user_id).delete(synchronize_session=False)
        db.commit()

        db.execute(group_members.delete().where(group_members.c.user_id == user_id))
        db.commit()

        db.query(User).filter(User.referred_by == user_id).update(
            {User.referred_by: None}, synchronize_session=False
        )
        db.commit()

        for chat in db.query(AuraChat).filter(AuraChat.user_id == user_id).all():
            db.delete(chat)
        db.commit()

        db.delete(user)
        db.commit()
        logger.info("Deleted user %s", user_id)


admin_service = AdminService()
