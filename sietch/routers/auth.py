from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from sietch.database import get_db
from sietch.dependencies import get_current_user
from sietch.models.user import User
from sietch.schemas.auth import TokenResponse, UserLogin, UserRegister, UserResponse
from sietch.services.auth_service import (
    authenticate_user,
    create_access_token,
    create_user,
    find_conflicting_user,
)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(body: UserRegister, db: AsyncSession = Depends(get_db)):
    existing = await find_conflicting_user(db, email=body.email, username=body.username)
    if existing is not None:
        detail = "Email already registered" if existing.email == body.email else "Username already taken"
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=detail)
    return await create_user(db, email=body.email, username=body.username, password=body.password)


@router.post("/login", response_model=TokenResponse)
async def login(body: UserLogin, db: AsyncSession = Depends(get_db)):
    user = await authenticate_user(db, email=body.email, password=body.password)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )
    return TokenResponse(access_token=create_access_token(user.id))


@router.get("/me", response_model=UserResponse)
async def me(current_user: User = Depends(get_current_user)):
    return current_user
