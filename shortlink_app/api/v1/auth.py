from fastapi import APIRouter, Depends, HTTPException, status
from shortlink_app.dependencies import get_current_user, get_user_service
from shortlink_app.exceptions import DuplicateUserError
from shortlink_app.models.user import User
from shortlink_app.schemas.user import UserCreate, UserRegistered, UserResponse
from shortlink_app.services.user_service import UserService

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=UserRegistered, status_code=status.HTTP_201_CREATED)
def register(
    user_data: UserCreate,
    user_service: UserService = Depends(get_user_service)
):
    """Create an account and return its API token (shown only once)"""
    try:
        user, token = user_service.register(user_data)
    except DuplicateUserError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    return UserRegistered(
        id=user.id,
        email=user.email,
        name=user.name,
        created_at=user.created_at,
        api_token=token,
    )


@router.get("/me", response_model=UserResponse)
def read_current_user(user: User = Depends(get_current_user)):
    return user
