# roadit/schemas/auth.py

from pydantic import BaseModel, Field
from roadit.schemas.issue import CamelModel

class MunicipalLoginIn(CamelModel):
    access_code: str = Field(min_length=1, max_length=512)

class TokenOut(BaseModel):
    access_token: str
    token_type: str
    expires_in: int
