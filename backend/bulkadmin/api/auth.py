"""API endpoints for the credential and OTP exchange."""

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from ..runtime import SessionRuntime
from .session import get_runtime

router = APIRouter(prefix="/auth", tags=["auth"])


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=3, description="User email")
    password: str = Field(..., min_length=1, description="Plaintext password, encrypted before sending")


class OtpRequest(BaseModel):
    otp: str = Field(..., min_length=1)


@router.post("/login")
async def login(request: LoginRequest, runtime: SessionRuntime = Depends(get_runtime)):
    """Request an OTP for the given credentials."""
    ok = await runtime.login_flow.start(request.email, request.password)
    if not ok:
        raise HTTPException(status_code=400, detail="Login failed")
    return {"success": True, "location": runtime.navigator.location}


@router.post("/otp")
async def verify_otp(request: OtpRequest, runtime: SessionRuntime = Depends(get_runtime)):
    """Verify the OTP and open the session."""
    ok = await runtime.login_flow.verify(request.otp)
    if not ok:
        raise HTTPException(status_code=400, detail="OTP verification failed")
    return {"success": True, "location": runtime.navigator.location}
