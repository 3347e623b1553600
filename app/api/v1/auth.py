from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from datetime import timedelta
from app.common.exceptions import AppError, Unauthorized
from app.core.dependencies import get_db, get_current_user
from app.core.security import create_access_token
from app.core.config import settings
from app.models.user import User
from app.services.user_service import authenticate_user, register_user
from app.schemas.auth import LoginRequest, LoginResponse, RegisterRequest, UserResponse
from app.schemas.common import ApiResponse, MessageResponse
from app.logger_config import logger

router = APIRouter()


@router.post("/register", response_model=ApiResponse[UserResponse], status_code=status.HTTP_201_CREATED)
def register(
    register_data: RegisterRequest,
    db: Session = Depends(get_db)
):
    """
    Register a new user. Default income and expense categories are created with the account.
    """
    try:
        user = register_user(
            db=db,
            email=register_data.email,
            password=register_data.password,
            confirm_password=register_data.confirm_password,
            name=register_data.name
        )
        return ApiResponse(data=UserResponse.model_validate(user))
    except AppError:
        raise
    except Exception:
        logger.exception("Error during registration")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An error occurred during registration"
        )


@router.post("/login", response_model=ApiResponse[LoginResponse])
def login(
    login_data: LoginRequest,
    db: Session = Depends(get_db)
):
    """
    Login endpoint - Authenticate user and return a bearer token carrying the user id.
    """
    logger.info(f"Login attempt for email: {login_data.email}")

    user = authenticate_user(db, login_data.email, login_data.password)
    if not user:
        raise Unauthorized("Incorrect email or password")

    access_token = create_access_token(
        data={"sub": user.id, "email": user.email},
        expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )

    logger.info(f"User {user.email} logged in successfully")

    return ApiResponse(data=LoginResponse(
        access_token=access_token,
        token_type="bearer",
        user=UserResponse.model_validate(user)
    ))


@router.get("/me", response_model=ApiResponse[UserResponse])
def me(current_user: User = Depends(get_current_user)):
    """Current user's public profile."""
    return ApiResponse(data=UserResponse.model_validate(current_user))


@router.get("/logout", response_model=ApiResponse[MessageResponse])
def logout():
    """
    logout the user; tokens are stateless so the client simply discards it
    """
    logger.info("User Logged out")
    return ApiResponse(data=MessageResponse(message="Logged out Successfully"))
