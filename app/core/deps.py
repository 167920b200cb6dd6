from fastapi import Request, Depends, HTTPException
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.users.models import User
from app.core.security import decode_access_token


def _read_token(request: Request) -> str | None:
    auth_header = request.headers.get("authorization")
    if auth_header and auth_header.lower().startswith("bearer "):
        return auth_header[7:].strip()

    token = request.cookies.get("access_token")
    # Support both "Bearer <token>" and raw token values in the cookie.
    if token and token.lower().startswith("bearer "):
        token = token[7:].strip()
    return token


def get_current_user(
    request: Request,
    db: Session = Depends(get_db)
) -> User:
    token = _read_token(request)
    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")

    payload = decode_access_token(token)
    if not payload:
        raise HTTPException(status_code=401, detail="Invalid token")

    username = payload.get("sub")
    if not username:
        raise HTTPException(status_code=401, detail="Invalid token payload")

    user = db.query(User).filter(User.username == username).first()
    if not user:
        print(f"[AUTH DEBUG] reject reason=user_not_found username={username} path={request.url.path}", flush=True)
        raise HTTPException(status_code=401, detail="User not found")

    return user
