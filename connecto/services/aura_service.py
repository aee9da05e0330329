import logging
from typing import List, Optional

from fastapi import Depends
from sqlalchemy.orm import Session
from sqlalchemy.sql import func

from connecto.core.errors import NotFound, ValidationFailed
from connecto.models.aura import AuraChat, AuraMessage
from connecto.models.user import User
from connecto.services.companion import AuraCompanion, get_companion

logger = logging.getLogger(__name__)

TITLE_LENGTH = 40
VOICE_ACKNOWLEDGEMENT = "I received your voice message. How can I help you today?"


def _chat_title(text: Optional[str], img: Optional[str], audio: Optional[str]) -> str:
    if text:
        return text[:TITLE_LENGTH]
    if audio and not img:
        return "Voice message"
    return "Image conversation"


class AuraService:
    """Persists Aura conversations around the stateless companion."""

    def __init__(self, companion: AuraCompanion):
        self.companion = companion

    def _user_turn(self, chat_id: int, text: Optional[str], img: Optional[str], audio: Optional[str]) -> AuraMessage:
        return AuraMessage(
            chat_id=chat_id,
            role="user",
            parts=[{"text": text or ("Image shared" if img else ""), "img": img, "audio": audio}],
        )

    async def _reply(self, text: Optional[str], img: Optional[str], audio: Optional[str], history) -> str:
        if text or img:
            return await self.companion.generate(text or "Image shared", history)
        # Audio is not transcribed, so there is nothing to send upstream
        return VOICE_ACKNOWLEDGEMENT

    def get_chat(self, db: Session, user: User, chat_id: int) -> AuraChat:
        chat = db.query(AuraChat).filter(AuraChat.id == chat_id, AuraChat.user_id == user.id).first()
        if not chat:
            raise NotFound("Chat not found")
        return chat

    def list_chats(self, db: Session, user: User) -> List[AuraChat]:
        return db.query(AuraChat).filter(
            AuraChat.user_id == user.id
        ).order_by(AuraChat.created_at.desc(), AuraChat.id.desc()).all()

    async def create_chat(self, db: Session, user: User, text: Optional[str] = None,
                          img: Optional[str] = None, audio: Optional[str] = None) -> AuraChat:
        if not (text or img or audio):
            raise ValidationFailed("Message must include text, an image or audio")

        chat = AuraChat(user_id=user.id, title=_chat_title(text, img, audio))
        db.add(chat)
        db.commit()
        db.refresh(chat)

        db.add(self._user_turn(chat.id, text, img, audio))
        db.commit()

        reply = await self._reply(text, img, audio, history=[])
        db.add(AuraMessage(chat_id=chat.id, role="model", parts=[{"text": reply}]))
        db.commit()
        db.refresh(chat)
        logger.info("Created Aura chat %s for user %s", chat.id, user.id)
        return chat

    async def continue_chat(self, db: Session, user: User, chat_id: int, question: Optional[str] = None,
                            img: Optional[str] = None, audio: Optional[str] = None) -> str:
        if not (question or img or audio):
            raise ValidationFailed("Message must include text, an image or audio")

        chat = self.get_chat(db, user, chat_id)
        history = [{"role": m.role, "parts": m.parts} for m in chat.messages]

        db.add(self._user_turn(chat.id, question, img, audio))
        chat.updated_at = func.now()
        db.commit()

        reply = await self._reply(question, img, audio, history=history)
        db.add(AuraMessage(chat_id=chat.id, role="model", parts=[{"text": reply}]))
        db.commit()
        return reply


def get_aura_service(companion: AuraCompanion = Depends(get_companion)) -> AuraService:
    return AuraService(companion)
