"""
Login/logout routes for the dashboard.
"""

from html import escape

from fastapi import APIRouter, Form, status
from fastapi.responses import HTMLResponse, RedirectResponse

from .dependencies import SESSION_COOKIE
from .service import access_key_service

router = APIRouter(tags=["Authentication"])

SESSION_MAX_AGE = 3600 * 24 * 30  # 30 days

LOGIN_HTML = """<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <title>RouteScout - Login</title>
    <style>
        body {{ font-family: Arial, sans-serif; background: #0f1117; color: #e8eaed;
               display: flex; align-items: center; justify-content: center; height: 100vh; }}
        form {{ background: #1a1d26; padding: 32px; border-radius: 10px; min-width: 320px; }}
        input {{ width: 100%; padding: 10px; margin: 12px 0; box-sizing: border-box; }}
        button {{ width: 100%; padding: 10px; background: #0d6efd; color: #fff; border: 0; }}
        .error {{ color: #dc3545; }}
    </style>
</head>
<body>
    <form method="post" action="/login">
        <h2>RouteScout</h2>
        <p class="error">{error}</p>
        <input type="password" name="key" placeholder="Access key" autofocus>
        <button type="submit">Sign in</button>
    </form>
</body>
</html>
"""


def render_login(error: str = "") -> HTMLResponse:
    return HTMLResponse(LOGIN_HTML.format(error=escape(error)))


@router.get("/login", response_class=HTMLResponse)
async def login_page():
    """Login form"""
    return render_login()


@router.post("/login")
async def login(key: str = Form("")):
    """
    Exchange an access key for a session cookie.

    Invalid or expired keys re-render the form with an error.
    """
    if not access_key_service.is_valid(key):
        return render_login("Invalid or expired key")

    response = RedirectResponse(url="/", status_code=status.HTTP_302_FOUND)
    response.set_cookie(
        key=SESSION_COOKIE,
        value=key,
        max_age=SESSION_MAX_AGE,
        httponly=True,
        samesite="lax",
        secure=False,  # Set to True in production with HTTPS
    )
    return response


@router.get("/logout")
async def logout():
    """Clear the session cookie"""
    response = RedirectResponse(url="/login", status_code=status.HTTP_302_FOUND)
    response.delete_cookie(key=SESSION_COOKIE)
    return response
