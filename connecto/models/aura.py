from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from connecto.db.database import Base


class AuraChat(Base):
    __tablename__ = "aura_chats"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    title = Column(String(100), default="Aura Chat")
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    messages = relationship(
        "AuraMessage",
        back_populates="chat",
        cascade="all, delete-orphan",
        order_by="AuraMessage.id",
    )


class AuraMessage(Base):
    __tablename__ = "aura_messages"

    id = Column(Integer, primary_key=True, index=True)
    chat_id = Column(Integer, ForeignKey("aura_chats.id"), index=True, nullable=False)
    role = Column(String(10), nullable=False)  # user or model
    # List of {"text", "img", "audio"} parts
    parts = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    chat = relationship("AuraChat", back_populates="messages")

    @property
    def text(self) -> str:
        if not self.parts:
            return ""
        return self.parts[0].get("text") or ""
