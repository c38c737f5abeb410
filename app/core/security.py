from datetime import datetime, timedelta, timezone
from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.config import settings
from app.core.database import get_db, read_guard
from app.core.exceptions import AuthenticationFailed
from app.models.user import User

bearer_scheme = HTTPBearer(auto_error=False)

class TokenData(BaseModel):
    user_id: Optional[int] = None

def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    return encoded_jwt

def create_user_token(user_id: int, expires_delta: Optional[timedelta] = None) -> str:
    return create_access_token({"sub": str(user_id)}, expires_delta)

async def _get_user_from_token(token: str, db: AsyncSession) -> User:
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        subject = payload.get("sub")
        if subject is None:
            raise AuthenticationFailed()
        token_data = TokenData(user_id=int(subject))
    except (JWTError, ValueError):
        raise AuthenticationFailed()
    async with read_guard():
        user = await db.get(User, token_data.user_id)
    if user is None:
        raise AuthenticationFailed()
    return user

async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    if credentials is None:
        raise AuthenticationFailed("Not authenticated")
    return await _get_user_from_token(credentials.credentials, db)

async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> Optional[User]:
    """Anonymous callers get None; a bad token is still rejected."""
    if credentials is None:
        return None
    return await _get_user_from_token(credentials.credentials, db)
