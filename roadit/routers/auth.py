# roadit/routers/auth.py

from fastapi import APIRouter, HTTPException, Request
from roadit.schemas.auth import MunicipalLoginIn, TokenOut
from roadit.core.security import check_access_code, make_token, MUNICIPAL_ROLE
from roadit.core.ratelimit import limiter
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

@router.post("/municipal-login", response_model=TokenOut)
@limiter.limit("5/minute")
def municipal_login(request: Request, body: MunicipalLoginIn):
    if not check_access_code(body.access_code):
        logger.warning("Rejected municipal login attempt")
        raise HTTPException(status_code=401, detail="Invalid access code")
    return make_token("municipal-staff", MUNICIPAL_ROLE)
