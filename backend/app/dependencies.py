import math
from dataclasses import dataclass

from fastapi import Depends, HTTPException, Query, status
from sqlalchemy.orm import Query as OrmQuery, Session

from .core.enums import UserRole
from .core.security import decode_access_token, is_admin_role, oauth2_scheme
from .database import get_db
from .models.user import User
from .schemas.user import TokenData


def get_current_user(
    token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)
) -> User:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials.",
        headers={"WWW-Authenticate": "Bearer"},
    )
    payload = decode_access_token(token)
    if payload is None:
        raise credentials_exception
    token_data = TokenData.model_validate(payload)
    if not token_data.sub:
        raise credentials_exception
    user = db.get(User, int(token_data.sub))
    if user is None:
        raise credentials_exception
    return user


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if not is_admin_role(current_user.role):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required.")
    return current_user


def require_super_admin(current_user: User = Depends(get_current_user)) -> User:
    if current_user.role != UserRole.SUPER_ADMIN:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    return current_user


@dataclass
class Pagination:
    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def apply(self, query: OrmQuery) -> list:
        return query.offset(self.offset).limit(self.limit).all()

    def total_pages(self, total: int) -> int:
        return math.ceil(total / self.limit)


def get_pagination(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
) -> Pagination:
    return Pagination(page=page, limit=limit)
