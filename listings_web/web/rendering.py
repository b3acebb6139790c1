"""
Page rendering and redirects.
Every page gets the pending flash messages and the logged-in user.
"""

from pathlib import Path
from typing import Any

from fastapi import Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from listings_web.core.flash import CATEGORIES, consume_flashes
from listings_web.core.sessions import SCOPE_KEY

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def render(
    request: Request,
    name: str,
    context: dict[str, Any] | None = None,
    status_code: int = 200,
) -> HTMLResponse:
    web_session = request.scope.get(SCOPE_KEY)
    if web_session is not None:
        messages = consume_flashes(web_session)
    else:
        messages = {category: [] for category in CATEGORIES}
    page = {
        "success": messages["success"],
        "error": messages["error"],
        "curr_user": getattr(request.state, "user", None),
        "default_image": request.app.state.settings.default_listing_image,
    }
    page.update(context or {})
    return templates.TemplateResponse(request, name, page, status_code=status_code)


def redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url, status_code=302)


def render_error(request: Request, status_code: int, message: str) -> HTMLResponse:
    return render(
        request,
        "error.html",
        {"status_code": status_code, "message": message},
        status_code=status_code,
    )
