"""
Account routes - signup, login, logout.
Failures are reported with a flash message and a redirect, never a bare error.
"""

from fastapi import APIRouter, Form, Request
from fastapi.responses import HTMLResponse
from pydantic import ValidationError

from listings_web.core.dependencies import Auth, CurrentUser, login_user, logout_user
from listings_web.core.exceptions import AuthFailure, ConflictError
from listings_web.core.flash import flash
from listings_web.core.validation import field_errors
from listings_web.schemas.user import UserCreate
from listings_web.web.rendering import redirect, render

router = APIRouter()


@router.get("/signup", response_class=HTMLResponse)
async def signup_form(request: Request, user: CurrentUser):
    return render(request, "users/signup.html")


@router.post("/signup")
async def signup(
    request: Request,
    auth: Auth,
    username: str = Form(""),
    email: str = Form(""),
    password: str = Form(""),
):
    """Register and log straight in."""
    try:
        data = UserCreate(username=username, email=email, password=password)
        registered = await auth.register(data)
    except ValidationError as exc:
        flash(request, "error", ",".join(e.message for e in field_errors(exc)))
        return redirect("/listings")
    except ConflictError as exc:
        flash(request, "error", exc.message)
        return redirect("/listings")
    login_user(request, auth, registered)
    flash(request, "success", "Successfully Login!")
    return redirect("/listings")


@router.get("/login", response_class=HTMLResponse)
async def login_form(request: Request, user: CurrentUser):
    return render(request, "users/login.html")


@router.post("/login")
async def login(
    request: Request,
    auth: Auth,
    username: str = Form(""),
    password: str = Form(""),
):
    try:
        user = await auth.authenticate(username, password)
    except AuthFailure as exc:
        flash(request, "error", exc.message)
        return redirect("/login")
    login_user(request, auth, user)
    flash(request, "success", "Successfully Login!")
    return redirect("/listings")


@router.get("/logout")
async def logout(request: Request):
    logout_user(request)
    flash(request, "success", "Successfully Logout!")
    return redirect("/listings")
