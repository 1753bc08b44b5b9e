from datetime import timedelta
from typing import Optional

import bcrypt
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from pydantic import BaseModel

from app.api.users.schemas import Role
from app.core.config import settings
from app.core.logger import logger
from app.core.utils import current_time


class Token(BaseModel):
    access_token: str
    token_type: str


class TokenData(BaseModel):
    user_id: int
    username: str
    role: Role


# Constants
ALGORITHM = 'HS256'

# System token used for internal service operations
# user_id=0 represents a system-level operation rather than a real user
SYSTEM_TOKEN = TokenData(user_id=0, username='', role=Role.REGISTRAR)

# OAuth2 scheme
oauth2_scheme = OAuth2PasswordBearer(tokenUrl='users/login')


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode(), salt).decode()


def verify_password(password: str, hashed: Optional[str]) -> bool:
    if not hashed:
        return False
    try:
        return bcrypt.checkpw(password.encode(), hashed.encode())
    except ValueError:
        logger.error('Stored password hash is malformed')
        return False


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    if expires_delta:
        to_encode.update({'exp': current_time() + expires_delta})

    encoded_jwt = jwt.encode(to_encode, settings.SECRET_KEY, algorithm=ALGORITHM)
    return encoded_jwt


async def get_current_user(token: str = Depends(oauth2_scheme)) -> TokenData:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail='Could not validate credentials',
        headers={'WWW-Authenticate': 'Bearer'},
    )

    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
    except jwt.ExpiredSignatureError:
        logger.error('Token has expired')
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail='Token has expired',
            headers={'WWW-Authenticate': 'Bearer'},
        )
    except JWTError as e:
        logger.error('Error decoding token: %s', str(e))
        raise credentials_exception

    user_id: int = payload.get('user_id')
    username: str = payload.get('username')
    role: str = payload.get('role')
    if user_id is None or username is None or role is None:
        logger.error('Invalid token payload: %s', payload)
        raise credentials_exception

    try:
        return TokenData(user_id=user_id, username=username, role=Role(role))
    except ValueError:
        logger.error('Unknown role in token payload: %s', role)
        raise credentials_exception


async def require_registrar(
    current_user: TokenData = Depends(get_current_user),
) -> TokenData:
    if current_user.role != Role.REGISTRAR:
        logger.error(
            'User %s with role %s tried to access a registrar resource',
            current_user.user_id,
            current_user.role.value,
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail='Forbidden: Insufficient permissions.',
        )
    return current_user
