from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session
from typing import Optional
from app.core.database import SessionLocal
from app.core.security import decode_access_token
from app.common.exceptions import Unauthorized
from app.models.user import User



def get_db():
    """Dependency to get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# auto_error=False so a missing header goes through the same Unauthorized path
bearer_scheme = HTTPBearer(auto_error=False)

def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db)
) -> User:
    """
    Get the currently authenticated user from the JWT token.
    Raises Unauthorized if the token is missing, invalid or the user does not exist.
    """
    if credentials is None:
        raise Unauthorized()

    payload = decode_access_token(credentials.credentials)
    if not payload:
        raise Unauthorized("Invalid token")

    user_id = payload.get("sub")
    if not user_id:
        raise Unauthorized("Token payload missing subject")

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise Unauthorized("User not found")

    return user


def get_current_user_id(
    current_user: User = Depends(get_current_user)
) -> str:
    """
    Resolve just the id of the current user.
    Every service call takes this id explicitly.
    """
    return current_user.id
