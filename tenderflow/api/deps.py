from typing import Optional

from fastapi import Depends, Header
from fastapi.security import OAuth2PasswordBearer

from tenderflow.core.errors import ValidationError
from tenderflow.core.security import Principal, authenticate
from tenderflow.services.ai_service import get_analyzer
from tenderflow.services.storage_service import get_storage

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="token")


async def get_current_principal(token: str = Depends(oauth2_scheme)) -> Principal:
    return authenticate(token)


async def get_expected_version(if_match: Optional[str] = Header(None)) -> Optional[int]:
    """Reads the document version a client last saw from ``If-Match``."""
    if not if_match:
        return None
    value = if_match.strip()
    if value.startswith("W/"):
        value = value[2:]
    try:
        return int(value.strip('"'))
    except ValueError:
        raise ValidationError.for_field("If-Match", "must be a document version number")


def storage_dependency():
    return get_storage()


def analyzer_dependency():
    return get_analyzer()
