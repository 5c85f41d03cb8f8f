from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from app.auth import require_roles
from app.database import get_db
from app.models.user import User, Role
from app.schemas.auth import UserResponse
from app.services.activity_service import activity_service
from app.services.user_store import UserStore

router = APIRouter()


@router.get("/users")
async def list_users(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(Role.ADMIN)),
):
    """All accounts, without password or reset fields."""
    users = await UserStore(db).list_all()
    return {
        "success": True,
        "message": "Users retrieved",
        "data": [UserResponse.model_validate(u) for u in users],
    }


@router.get("/recent-activities")
async def recent_activities(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(Role.ADMIN, Role.DOCTOR, Role.STAFF)),
):
    entries = await activity_service.recent_activities(db)
    return {
        "success": True,
        "message": "Recent activities retrieved",
        "data": [e.model_dump(mode="json", exclude_none=True) for e in entries],
    }
