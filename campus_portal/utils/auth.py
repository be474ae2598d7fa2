from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from bson import ObjectId
from datetime import datetime, timedelta
from typing import Optional

from campus_portal.database import get_db
from campus_portal.utils.errors import Forbidden
from campus_portal.utils.security import (
    SECRET_KEY,
    ALGORITHM,
    ACCESS_TOKEN_EXPIRE_MINUTES,
    ROLE_RECRUITER,
    ROLE_COLLECTIONS,
)

# "Paste Token" security scheme
security = HTTPBearer()


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    to_encode = data.copy()
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)
    return encoded_jwt


async def get_current_user(credentials: HTTPAuthorizationCredentials = Depends(security)):
    """Resolve the bearer token to a student or recruiter record with an explicit role."""
    token = credentials.credentials

    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        user_id: str = payload.get("sub")
        role: str = payload.get("role")
    except JWTError:
        raise credentials_exception

    if user_id is None or role not in ROLE_COLLECTIONS or not ObjectId.is_valid(user_id):
        raise credentials_exception

    db = get_db()
    user = await db[ROLE_COLLECTIONS[role]].find_one({"_id": ObjectId(user_id)})
    if user is None:
        raise credentials_exception

    user["role"] = role
    return user


async def require_recruiter(current_user: dict = Depends(get_current_user)):
    """Authorization check for job mutations."""
    if current_user["role"] != ROLE_RECRUITER:
        raise Forbidden("Access denied. Only recruiters can manage jobs.")
    return current_user


async def require_job_poster(current_user: dict = Depends(get_current_user)):
    """Recruiter gate for posting; resolved before the job body is validated."""
    if current_user["role"] != ROLE_RECRUITER:
        raise Forbidden("Access denied. Only recruiters can post jobs.")
    return current_user
