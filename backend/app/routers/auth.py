from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from app.auth import get_current_user
from app.database import get_db
from app.models.user import User
from app.schemas.auth import (
    ForgotPasswordRequest,
    LoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
    UpdateUserRequest,
    UserResponse,
)
from app.services.auth_service import AuthService

router = APIRouter()


def get_auth_service(db: AsyncSession = Depends(get_db)) -> AuthService:
    return AuthService(db)


@router.post("/register", status_code=201)
async def register(body: RegisterRequest, service: AuthService = Depends(get_auth_service)):
    user, token = await service.register(body.username, body.email, body.password, body.role)
    return {
        "success": True,
        "message": "User registered successfully",
        "data": {"user": UserResponse.model_validate(user), "token": token},
    }


@router.post("/login")
async def login(body: LoginRequest, service: AuthService = Depends(get_auth_service)):
    user, token = await service.login(body.email, body.password)
    return {
        "success": True,
        "message": "Login successful",
        "data": {"user": UserResponse.model_validate(user), "token": token},
    }


@router.get("/profile")
async def get_profile(current_user: User = Depends(get_current_user)):
    return {
        "success": True,
        "message": "Profile retrieved",
        "data": {"user": UserResponse.model_validate(current_user)},
    }


@router.put("/users/{user_id}")
async def update_user(
    user_id: int,
    body: UpdateUserRequest,
    current_user: User = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service),
):
    """Admins may edit anyone, including role. Everyone else only themselves, never role."""
    user = await service.update_user(user_id, body.model_dump(exclude_unset=True), current_user)
    return {
        "success": True,
        "message": "User updated successfully",
        "data": {"user": UserResponse.model_validate(user)},
    }


@router.post("/forgot-password")
async def forgot_password(body: ForgotPasswordRequest, service: AuthService = Depends(get_auth_service)):
    await service.forgot_password(body.email)
    return {"success": True, "message": "Password reset email sent"}


@router.post("/reset-password")
async def reset_password(body: ResetPasswordRequest, service: AuthService = Depends(get_auth_service)):
    await service.reset_password(body.token, body.new_password)
    return {"success": True, "message": "Password reset successful"}
