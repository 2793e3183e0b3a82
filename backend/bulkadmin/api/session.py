"""API endpoints exposing the session lifecycle to the dashboard UI."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field

from ..logging import get_logger
from ..runtime import SessionRuntime
from ..session.manager import DEFAULT_LOGOUT_MESSAGE
from ..ui.activity import ACTIVITY_EVENTS
from ..ui.guards import guard_for

logger = get_logger("api")

router = APIRouter(prefix="/session", tags=["session"])


def get_runtime(request: Request) -> SessionRuntime:
    return request.app.state.runtime


# --- Request/Response Models ---

class SessionStatusResponse(BaseModel):
    """Session status without the token."""
    is_authenticated: bool
    role: Optional[str] = None
    user_email: Optional[str] = None
    login_time: Optional[int] = None
    location: str


class TokenResponse(BaseModel):
    token: str


class ActivityRequest(BaseModel):
    event: str = Field(default="mousemove", description="One of mousemove, keydown, touchstart, scroll")


class LogoutRequest(BaseModel):
    reason: str = Field(default=DEFAULT_LOGOUT_MESSAGE)


class GuardResponse(BaseModel):
    allowed: bool
    redirect: Optional[str] = None
    replace: bool = False


class NotificationResponse(BaseModel):
    severity: str
    message: str
    created_at: str


# --- Endpoints ---

@router.get("", response_model=SessionStatusResponse)
async def get_session(runtime: SessionRuntime = Depends(get_runtime)):
    state = runtime.manager.get_state()
    return SessionStatusResponse(**state.to_dict(), location=runtime.navigator.location)


@router.get("/token", response_model=TokenResponse)
async def get_token(runtime: SessionRuntime = Depends(get_runtime)):
    """Bearer token for page-level requests to the remote API."""
    token = runtime.manager.token
    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return TokenResponse(token=token)


@router.post("/activity")
async def record_activity(request: ActivityRequest, runtime: SessionRuntime = Depends(get_runtime)):
    if request.event not in ACTIVITY_EVENTS:
        raise HTTPException(status_code=400, detail=f"Unknown activity event: {request.event}")
    runtime.activity.emit(request.event)
    return {"is_authenticated": runtime.manager.is_authenticated}


@router.post("/logout")
async def logout(request: Optional[LogoutRequest] = None, runtime: SessionRuntime = Depends(get_runtime)):
    reason = request.reason if request else DEFAULT_LOGOUT_MESSAGE
    runtime.manager.logout(reason)
    return {"success": True, "location": runtime.navigator.location}


@router.post("/refresh")
async def refresh(runtime: SessionRuntime = Depends(get_runtime)):
    if not runtime.manager.is_authenticated:
        raise HTTPException(status_code=401, detail="Not authenticated")
    await runtime.manager.refresh_token()
    if not runtime.manager.is_authenticated:
        raise HTTPException(status_code=502, detail="Token refresh failed")
    return {"success": True}


@router.get("/guard", response_model=GuardResponse)
async def check_guard(path: str, runtime: SessionRuntime = Depends(get_runtime)):
    redirect = guard_for(path, runtime.manager, runtime.persistent)
    if redirect is None:
        return GuardResponse(allowed=True)
    return GuardResponse(allowed=False, redirect=redirect.route, replace=redirect.replace)


@router.get("/notifications", response_model=list[NotificationResponse])
async def get_notifications(runtime: SessionRuntime = Depends(get_runtime)):
    """Pending toasts, oldest first. Each is returned once."""
    return [
        NotificationResponse(severity=n.severity, message=n.message, created_at=n.created_at)
        for n in runtime.notifier.drain()
    ]
