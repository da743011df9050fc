"""
Account schemas (Pydantic models for request/response).

These schemas define:
- Signup and login request bodies
- The stored user account document
"""

from pydantic import BaseModel, Field


# ================================
# Request Schemas
# ================================

class UserSignup(BaseModel):
    """
    Signup request.

    Example request:
        POST /signup
        {
            "username": "alice",
            "password": "pw1",
            "age": 30,
            "gender": "f"
        }
    """
    username: str = Field(
        ...,
        min_length=1,
        max_length=64,
        pattern=r"^[a-z0-9_]+$",
        description="Lowercase letters, digits and underscores",
        examples=["alice"]
    )
    password: str = Field(
        ...,
        min_length=1,
        description="Account password",
        examples=["pw1"]
    )
    age: int = Field(default=0, ge=0, description="User's age", examples=[30])
    gender: str = Field(default="", max_length=32, description="User's gender", examples=["f"])


class UserLogin(BaseModel):
    """
    Login request.

    Example request:
        POST /login
        {
            "username": "alice",
            "password": "pw1"
        }

    On success the response body is the token as plain text.
    """
    username: str = Field(..., description="Account username", examples=["alice"])
    password: str = Field(..., description="Account password", examples=["pw1"])


# ================================
# Stored Account
# ================================

class UserAccount(BaseModel):
    """
    Account document as stored in the user index.

    ``password`` holds a bcrypt hash, never the plaintext.
    """
    username: str
    password: str
    age: int = 0
    gender: str = ""

    def to_document(self) -> dict:
        return self.model_dump()
