from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional

import jwt
from pydantic import BaseModel

from tenderflow.core.config import settings
from tenderflow.core.errors import AuthenticationError
from tenderflow.models.enums import Role


class Principal(BaseModel):
    id: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


def create_access_token(principal: Principal, expires_minutes: Optional[int] = None) -> str:
    expire_time = datetime.now(tz=timezone.utc) + timedelta(minutes=expires_minutes or settings.JWT_EXPIRES_MINUTES)
    payload = {"sub": principal.id, "role": principal.role.value, "exp": expire_time}
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def authenticate(token: str) -> Principal:
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except jwt.PyJWTError as exc:
        raise AuthenticationError("Invalid access token") from exc
    if "sub" not in payload or "role" not in payload:
        raise AuthenticationError("Access token is missing subject or role")
    try:
        return Principal(id=str(payload["sub"]), role=Role(payload["role"]))
    except ValueError as exc:
        raise AuthenticationError(f"Unknown role in access token: {payload['role']}") from exc


def authorize(principal: Principal, required_roles: Iterable[Role]) -> bool:
    roles = set(required_roles)
    return not roles or principal.role in roles
