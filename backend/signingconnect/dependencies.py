import jwt
from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from signingconnect.database import get_db
from signingconnect.models.user import User
from signingconnect.services.auth_service import auth_service
from signingconnect.utils.security import decode_access_token


async def get_current_user(
    authorization: str | None = Header(None),
    db: Session = Depends(get_db),
) -> User:
    if not authorization or not authorization.startswith("Bearer ") or not authorization[7:].strip():
        raise HTTPException(status_code=401, detail="Access token required")
    token = authorization[7:].strip()
    try:
        claims = decode_access_token(token)
    except jwt.PyJWTError:
        raise HTTPException(status_code=403, detail="Invalid token")

    # Re-fetch on every request so deactivated accounts lose access immediately.
    user = auth_service.get_active_user(db, claims.get("sub"))
    if user is None:
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    return user


def require_user_type(*user_types: str):
    async def _require(user: User = Depends(get_current_user)) -> User:
        if user.user_type not in user_types:
            if user_types == ("admin",):
                raise HTTPException(status_code=403, detail="Admin access required")
            raise HTTPException(status_code=403, detail=f"{' or '.join(user_types).capitalize()} access required")
        return user

    return _require


require_admin = require_user_type("admin")
require_company = require_user_type("company")
require_agent = require_user_type("agent")
