from pydantic import BaseModel

from matatu.schemas.user import UserOut

class TokenPair(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"

class LoginResponse(TokenPair):
    message: str = "Login successful"
    user: UserOut

class LoginRequest(BaseModel):
    # username or email
    username: str
    password: str

class RefreshRequest(BaseModel):
    refresh_token: str
