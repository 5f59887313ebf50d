"""Style audit API.

Runs the audit engine over a posted style tree snapshot, or captures a live
page first and audits that.
"""

from typing import Any, Dict, Literal, Optional

import structlog
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from ..capture import StyleTreeCapture
from ..config import get_settings
from ..engine.errors import SnapshotError
from ..engine.models import StyleTree
from ..engine.session import StyleAuditEngine

logger = structlog.get_logger()
router = APIRouter(prefix="/api/v1/style-audit", tags=["Style Audit"])


# =============================================================================
# Request Models
# =============================================================================

class AuditRequest(BaseModel):
    """Request to audit a captured style tree."""
    snapshot: Dict[str, Any] = Field(..., description="Style tree snapshot (envelope or bare root node)")
    check_aaa: Optional[bool] = Field(None, description="Override AAA contrast checking")


class ViewportConfig(BaseModel):
    """Viewport configuration."""
    width: int = Field(1440, ge=320, le=3840)
    height: int = Field(900, ge=480, le=2160)


class CaptureAuditRequest(BaseModel):
    """Request to capture a URL and audit it."""
    url: str = Field(..., description="URL to capture")
    browser: Literal["chromium", "firefox", "webkit"] = Field("chromium", description="Browser to use")
    viewport: Optional[ViewportConfig] = Field(None, description="Viewport dimensions")
    check_aaa: Optional[bool] = Field(None, description="Override AAA contrast checking")


def _engine(check_aaa: Optional[bool]) -> StyleAuditEngine:
    settings = get_settings()
    if check_aaa is not None:
        settings = settings.model_copy(update={"check_aaa": check_aaa})
    return StyleAuditEngine(settings)


# =============================================================================
# Endpoints
# =============================================================================

@router.post("/run")
def run_audit(request: AuditRequest):
    """
    Audit a style tree snapshot.

    Returns the fingerprint buckets, summary and ordered issue list.
    """
    try:
        tree = StyleTree.from_dict(request.snapshot)
    except SnapshotError as e:
        logger.warning("Rejected malformed snapshot", error=str(e))
        raise HTTPException(status_code=422, detail=str(e))

    result = _engine(request.check_aaa).run_audit(tree)
    return result.to_dict()


@router.post("/capture")
async def capture_and_audit(request: CaptureAuditRequest):
    """
    Capture a live page and audit its style tree.
    """
    viewport = request.viewport.model_dump() if request.viewport else None
    capture = StyleTreeCapture()

    try:
        tree = await capture.capture_url(request.url, browser_type=request.browser, viewport=viewport)
    except SnapshotError as e:
        logger.error("Capture failed", url=request.url, error=str(e))
        raise HTTPException(status_code=502, detail=f"Capture failed: {e}")

    result = _engine(request.check_aaa).run_audit(tree)
    return result.to_dict()
