from pydantic import BaseModel, Field, field_validator

from pulsehr.core.security import password_bytes_ok


class AdminCredentials(BaseModel):
    username: str = Field(..., min_length=3, max_length=64)
    password: str = Field(..., min_length=1)

    @field_validator("username")
    @classmethod
    def strip_username(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Username is required")
        return v


class AdminRegisterIn(AdminCredentials):
    password: str = Field(..., min_length=8)

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str) -> str:
        # bcrypt only hashes the first 72 bytes
        if not password_bytes_ok(v):
            raise ValueError("Password too long (bcrypt limit is 72 bytes)")
        return v


class AdminLoginIn(AdminCredentials):
    pass


class AdminOut(BaseModel):
    id: int
    username: str

    model_config = {"from_attributes": True}


class AuthResult(BaseModel):
    success: bool
    username: str | None = None
