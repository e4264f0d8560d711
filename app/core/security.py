# app/core/security.py

import datetime
from typing import Literal, Optional
from bson import ObjectId
from fastapi import Depends, Header
from jose import jwt, JWTError, ExpiredSignatureError
from pydantic import BaseModel, ConfigDict

from app.core.config import settings
from app.core.errors import ConfigurationError, Forbidden, Unauthorized
from app.core.logger import logger
from app.db.client import get_db

USER_COLLECTIONS = {
    "doctor": "doctors",
    "patient": "patients",
}


class AuthContext(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    id: str
    type: Literal["doctor", "patient"]
    user: dict


# Create JWT token with expiration
def create_access_token(data: dict, expires_delta: Optional[datetime.timedelta] = None) -> str:
    if not settings.JWT_SECRET:
        raise ConfigurationError()
    to_encode = data.copy()
    expires_delta = expires_delta or datetime.timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": datetime.datetime.now(datetime.timezone.utc) + expires_delta})
    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def _load_user(db, user_type: str, user_id: str) -> Optional[dict]:
    collection = USER_COLLECTIONS.get(user_type)
    if not collection or not ObjectId.is_valid(user_id):
        return None
    return db[collection].find_one({"_id": ObjectId(user_id)})


# Resolve the caller from the bearer token
def authenticate(
        authorization: Optional[str] = Header(None),
        db=Depends(get_db)
) -> AuthContext:
    if not authorization:
        logger.error("Auth Error: Missing Authorization header")
        raise Unauthorized("Missing token")

    if not authorization.startswith("Bearer "):
        logger.error("Auth Error: Invalid Authorization header format")
        raise Unauthorized("Invalid token format")

    token = authorization[7:].strip()
    if not token:
        logger.error("Auth Error: Empty token")
        raise Unauthorized("Missing token")

    if not settings.JWT_SECRET:
        logger.error("Auth Error: JWT_SECRET is not configured")
        raise ConfigurationError()

    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except ExpiredSignatureError:
        logger.error("Auth Error: Token expired")
        raise Unauthorized("Token expired")
    except JWTError as e:
        logger.error(f"Auth Error: {str(e)}")
        raise Unauthorized("Invalid token")

    user_id = payload.get("id")
    user_type = payload.get("type")
    user = _load_user(db, user_type, str(user_id)) if user_id else None

    if not user:
        logger.error(f"Auth Error: User not found - ID: {user_id}, Type: {user_type}")
        raise Unauthorized("Invalid user")

    return AuthContext(id=str(user_id), type=user_type, user=user)


#  Role-based access control
def require_role(role: str):
    def _role_checker(auth: AuthContext = Depends(authenticate)) -> AuthContext:
        if auth.type != role:
            raise Forbidden("Insufficient role permissions")
        return auth
    return _role_checker
