from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from connecto.core.security import require_admin
from connecto.db.database import get_db
from connecto.models.schemas import ActionResponse, GroupCreate, GroupResponse, UserResponse
from connecto.models.user import User
from connecto.realtime.hub import ConnectionHub, get_hub
from connecto.services.admin_service import admin_service

# Every route here requires an authenticated admin
router = APIRouter(
    prefix="/admin",
    tags=["admin"],
    dependencies=[Depends(require_admin)],
)


@router.get("/pending-users", response_model=List[UserResponse])
async def get_pending_users(db: Session = Depends(get_db)):
    return admin_service.pending_users(db)


@router.get("/all-users", response_model=List[UserResponse])
async def get_all_users(db: Session = Depends(get_db)):
    return admin_service.all_users(db)


@router.get("/groups", response_model=List[GroupResponse])
async def get_groups(db: Session = Depends(get_db)):
    return admin_service.list_groups(db)


@router.post("/verify-user/{user_id}", response_model=ActionResponse)
async def verify_user(user_id: int, db: Session = Depends(get_db)):
    user = admin_service.verify_user(db, user_id)
    return ActionResponse(message="User verified successfully", referral_code=user.referral_code)


@router.post("/reject-user/{user_id}", response_model=ActionResponse)
async def reject_user(user_id: int, db: Session = Depends(get_db)):
    admin_service.reject_user(db, user_id)
    return ActionResponse(message="User rejected successfully")


@router.post("/create-group", response_model=GroupResponse, status_code=status.HTTP_201_CREATED)
async def create_group(data: GroupCreate, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return admin_service.create_group(db, admin, data)


@router.delete("/delete-user/{user_id}", response_model=ActionResponse)
async def delete_user(user_id: int, db: Session = Depends(get_db), hub: ConnectionHub = Depends(get_hub)):
    """Remove the user, their direct and group messages, memberships and Aura chats."""
    admin_service.delete_user(db, user_id)
    # Stop pushes to a still-open socket of the deleted user
    await hub.drop_user(user_id)
    return ActionResponse(message="User deleted successfully")
