"""Static pages: the index view and the favicon."""

from fastapi import APIRouter, Request
from fastapi.responses import FileResponse, HTMLResponse

from scratch_auth_demo.api.deps import PACKAGE_DIR, templates

router = APIRouter()

_FAVICON_PATH = PACKAGE_DIR / "static" / "favicon.svg"


@router.get("/", response_class=HTMLResponse)
async def index(request: Request) -> HTMLResponse:
    """Welcome page linking to /auth."""
    return templates.TemplateResponse(request, "index.html", {})


@router.get("/favicon.ico", include_in_schema=False)
async def favicon() -> FileResponse:
    """Serve the application icon (SVG)."""
    return FileResponse(_FAVICON_PATH, media_type="image/svg+xml")
