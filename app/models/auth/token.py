from pydantic import BaseModel, ConfigDict, EmailStr


class TokenRequest(BaseModel):
    """Claims to sign into a bearer token; any extra claims are kept"""
    model_config = ConfigDict(extra="allow")

    email: EmailStr
