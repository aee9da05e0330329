from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from connecto.core.security import get_current_user
from connecto.db.database import get_db
from connecto.models.schemas import (
    GroupMessageResponse,
    GroupResponse,
    MessageContent,
    MessageResponse,
    UserResponse,
)
from connecto.models.user import User
from connecto.services.messaging_service import MessagingService, get_messaging_service

router = APIRouter(
    prefix="/messages",
    tags=["messages"]
)


@router.get("/users", response_model=List[UserResponse])
async def get_users_for_sidebar(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    service: MessagingService = Depends(get_messaging_service),
):
    return service.sidebar_users(db, current_user)


@router.get("/therapists", response_model=List[UserResponse])
async def get_therapists_for_sidebar(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    service: MessagingService = Depends(get_messaging_service),
):
    return service.therapists(db)


@router.get("/groups", response_model=List[GroupResponse])
async def get_groups(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    service: MessagingService = Depends(get_messaging_service),
):
    return service.list_groups(db)


@router.get("/group/{group_id}", response_model=List[GroupMessageResponse])
async def get_group_messages(
    group_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    service: MessagingService = Depends(get_messaging_service),
):
    return service.get_group_messages(db, group_id)


@router.get("/{user_id}", response_model=List[MessageResponse])
async def get_messages(
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    service: MessagingService = Depends(get_messaging_service),
):
    """Direct messages between the caller and `user_id`, oldest first."""
    return service.get_conversation(db, current_user.id, user_id)


@router.post("/send/{receiver_id}", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def send_message(
    receiver_id: int,
    content: MessageContent,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    service: MessagingService = Depends(get_messaging_service),
):
    """Store a direct message and push `newMessage` to the receiver if they are online."""
    return await service.send_direct(db, current_user, receiver_id, content)


@router.post("/send-group/{group_id}", response_model=GroupMessageResponse, status_code=status.HTTP_201_CREATED)
async def send_group_message(
    group_id: int,
    content: MessageContent,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    service: MessagingService = Depends(get_messaging_service),
):
    return await service.send_group(db, current_user, group_id, content)


@router.post("/join-group/{group_id}", response_model=GroupResponse)
async def join_group(
    group_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    service: MessagingService = Depends(get_messaging_service),
):
    return await service.join_group(db, current_user, group_id)
