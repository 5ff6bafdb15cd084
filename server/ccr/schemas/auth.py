from pydantic import BaseModel, EmailStr, Field


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)
    first_name: str | None = Field(None, max_length=120)
    last_name: str | None = Field(None, max_length=120)
    phone: str | None = Field(None, max_length=25)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class WhoAmIResponse(BaseModel):
    id: int
    user: EmailStr
    full_name: str | None = None
    role: str | None = None
    role_display_name: str | None = None
    admin_level: str = "none"
