from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from connecto.core.security import get_current_user
from connecto.db.database import get_db
from connecto.models.schemas import ChatCreate, ChatDetail, ChatSummary, ChatUpdate, ChatUpdateResponse
from connecto.models.user import User
from connecto.services.aura_service import AuraService, get_aura_service

router = APIRouter(
    prefix="/chats",
    tags=["chats"]
)


@router.post("", response_model=ChatDetail, status_code=status.HTTP_201_CREATED)
async def create_chat(
    data: ChatCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    service: AuraService = Depends(get_aura_service),
):
    """Open a new Aura conversation with its first user turn and Aura's reply."""
    return await service.create_chat(db, current_user, text=data.text, img=data.img, audio=data.audio)


# Must be declared before /{chat_id}
@router.get("/userchats", response_model=List[ChatSummary])
async def get_user_chats(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    service: AuraService = Depends(get_aura_service),
):
    return service.list_chats(db, current_user)


@router.get("/{chat_id}", response_model=ChatDetail)
async def get_chat(
    chat_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    service: AuraService = Depends(get_aura_service),
):
    return service.get_chat(db, current_user, chat_id)


@router.put("/{chat_id}", response_model=ChatUpdateResponse)
async def update_chat(
    chat_id: int,
    data: ChatUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    service: AuraService = Depends(get_aura_service),
):
    reply = await service.continue_chat(
        db, current_user, chat_id, question=data.question, img=data.img, audio=data.audio
    )
    return ChatUpdateResponse(updated=True, ai_response=reply)
