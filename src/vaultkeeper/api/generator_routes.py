# Generator API - password generation and strength scoring

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from ..generator import PasswordPolicy, evaluate_strength, generate_password
from ..generator.password_generator import DEFAULT_LENGTH
from ..vault import PolicyError
from .security import verify_session_token

router = APIRouter(prefix="/api/generator", tags=["generator"])


class GeneratePasswordRequest(BaseModel):
    length: int = Field(DEFAULT_LENGTH, ge=1, le=256)
    lowercase: bool = True
    uppercase: bool = True
    digits: bool = True
    symbols: bool = True


class StrengthRequest(BaseModel):
    password: str


@router.post("/password")
def create_password(
    request: GeneratePasswordRequest,
    token: str = Depends(verify_session_token)
):
    """Generate a random password from the requested policy."""
    policy = PasswordPolicy(**request.model_dump())
    try:
        password = generate_password(policy)
    except PolicyError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return {"password": password, "strength": evaluate_strength(password).to_dict()}


@router.post("/strength")
def score_password(
    request: StrengthRequest,
    token: str = Depends(verify_session_token)
):
    """Score a password (nothing is stored or logged)."""
    return evaluate_strength(request.password).to_dict()
