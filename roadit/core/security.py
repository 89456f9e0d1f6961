# roadit/core/security.py
from fastapi import HTTPException, status, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Optional
import hmac, time, jwt
from roadit.core.config import settings

ALGO = "HS256"
ACCESS_TTL = 12 * 3600
MUNICIPAL_ROLE = "municipal"
bearer = HTTPBearer(auto_error=False)

def check_access_code(code: str) -> bool:
    expected = settings.municipal_access_code
    if not expected:
        return False
    return hmac.compare_digest(code.encode("utf-8"), expected.encode("utf-8"))

def _make_token(sub: str, role: str, ttl: int) -> str:
    now = int(time.time())
    payload = {"sub": sub, "role": role, "iat": now, "exp": now + ttl}
    return jwt.encode(payload, settings.jwt_secret, algorithm=ALGO)

def make_token(sub: str, role: str) -> dict:
    return {
        "access_token": _make_token(sub, role, ACCESS_TTL),
        "token_type": "bearer",
        "expires_in": ACCESS_TTL,
    }

def _decode_token(creds: Optional[HTTPAuthorizationCredentials]) -> dict:
    if not creds:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    try:
        return jwt.decode(creds.credentials, settings.jwt_secret, algorithms=[ALGO])
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token expired")
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

def require_municipal(creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer)) -> Optional[dict]:
    """Gate for staff-only actions. Open when no MUNICIPAL_ACCESS_CODE is configured."""
    if not settings.municipal_access_code:
        return None
    payload = _decode_token(creds)
    if payload.get("role") != MUNICIPAL_ROLE:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="forbidden")
    return payload
