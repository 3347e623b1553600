from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    # normalized by authenticate_user, format checks happen only at registration
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class RegisterRequest(BaseModel):
    # Field rules are enforced by the registration service so the
    # messages are the same for API and direct callers
    email: str = ""
    password: str = ""
    confirm_password: str = ""
    name: str = ""


class UserResponse(BaseModel):
    id: str
    email: str
    name: str

    class Config:
        from_attributes = True


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse
