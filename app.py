import logging
from typing import Optional

from fastapi import FastAPI, Depends, Request, Form
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from sqlalchemy.orm import Session

from auth import (
    authenticate,
    create_session,
    create_user,
    destroy_session,
    get_current_session,
    normalize_email,
    session_from_request,
)
from check_users import list_users, role_counts
from config import BASE_DIR, MIN_PASSWORD_LENGTH, SECURE_COOKIES, SESSION_COOKIE_NAME, SESSION_TTL
from database import Base, engine, get_db
from models import User, UserSession
from roles import DASHBOARD_ROLES, Destination, Role, landing_destination, session_role

logger = logging.getLogger("dashboard.web")

# Create database tables on startup (simple dev setup)
Base.metadata.create_all(bind=engine)

app = FastAPI(title="Dashboard")

# Static files (CSS) and templates
app.mount("/static", StaticFiles(directory=str(BASE_DIR / "static")), name="static")
templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))

UNAUTHORIZED_PATH = "/unauthorized"


def guard_redirect(session: Optional[UserSession], *, admin_only: bool = False) -> Optional[str]:
    """
    Return where a dashboard page should send the browser instead of
    rendering, or ``None`` when the session may see the page.
    """
    if session is None:
        return Destination.LOGIN.value
    role = session_role(session)
    if role not in DASHBOARD_ROLES:
        return UNAUTHORIZED_PATH
    if admin_only and role is not Role.ADMIN:
        return "/dashboard"
    return None


@app.get("/", response_class=HTMLResponse)
def root():
    """Redirect root to the dashboard, which picks the landing page."""
    return RedirectResponse(url="/dashboard")


# ---------------- Login ----------------

@app.get("/login", response_class=HTMLResponse)
def login_form(request: Request):
    return templates.TemplateResponse(request, "login.html", {})


@app.post("/login", response_class=HTMLResponse)
def login_submit(
    request: Request,
    email: str = Form(...),
    password: str = Form(...),
    db: Session = Depends(get_db),
):
    """
    Check the credentials, open a session and hand over to /dashboard.
    """
    user = authenticate(db, email, password)
    if user is None:
        logger.warning("Failed login for %s", email)
        return templates.TemplateResponse(
            request,
            "login.html",
            {"error": "Invalid email or password.", "email": email},
            status_code=401,
        )

    session = create_session(db, user)
    logger.info("User %s logged in", user.id)
    response = RedirectResponse(url="/dashboard", status_code=303)
    response.set_cookie(
        SESSION_COOKIE_NAME,
        session.token,
        max_age=int(SESSION_TTL.total_seconds()),
        httponly=True,
        samesite="lax",
        secure=SECURE_COOKIES,
    )
    return response


@app.post("/logout")
def logout(request: Request, db: Session = Depends(get_db)):
    token = request.cookies.get(SESSION_COOKIE_NAME)
    if token:
        destroy_session(db, token)
        logger.info("Session closed")
    response = RedirectResponse(url=Destination.LOGIN.value, status_code=303)
    response.delete_cookie(SESSION_COOKIE_NAME)
    return response


# ---------------- Dashboard ----------------

@app.get("/dashboard")
async def dashboard(request: Request, db: Session = Depends(get_db)):
    """Send the browser to the landing page that matches the user's role."""
    session = await get_current_session(request, db)
    destination = landing_destination(session)
    if session is not None and session_role(session) is Role.OTHER:
        logger.info(
            "Role %r of user %s has no dashboard of its own; using %s",
            session.user.role,
            session.user_id,
            destination.value,
        )
    return RedirectResponse(url=destination.value)


def _render_admin_dashboard(
    request: Request,
    db: Session,
    session: UserSession,
    *,
    error: Optional[str] = None,
    form: Optional[dict] = None,
    status_code: int = 200,
):
    return templates.TemplateResponse(
        request,
        "dashboard_admin.html",
        {
            "user": session.user,
            "users": list_users(db),
            "role_counts": sorted(role_counts(db).items()),
            "error": error,
            "form": form or {},
        },
        status_code=status_code,
    )


@app.get("/dashboard/admin", response_class=HTMLResponse)
def admin_dashboard(request: Request, db: Session = Depends(get_db)):
    session = session_from_request(request, db)
    redirect_to = guard_redirect(session, admin_only=True)
    if redirect_to is not None:
        return RedirectResponse(url=redirect_to)
    return _render_admin_dashboard(request, db, session)


@app.post("/dashboard/admin/users", response_class=HTMLResponse)
def admin_create_user(
    request: Request,
    name: str = Form(""),
    email: str = Form(""),
    password: str = Form(""),
    role: str = Form(""),
    db: Session = Depends(get_db),
):
    """
    Create a dashboard user with a credential account. Only admins may
    do this; validation errors re-render the admin page.
    """
    session = session_from_request(request, db)
    redirect_to = guard_redirect(session, admin_only=True)
    if redirect_to is not None:
        return RedirectResponse(url=redirect_to, status_code=303)

    form = {"name": name, "email": email, "role": role}
    error = None
    if not (name.strip() and email.strip() and password and role.strip()):
        error = "All fields are required."
    elif len(password) < MIN_PASSWORD_LENGTH:
        error = f"Password must be at least {MIN_PASSWORD_LENGTH} characters long."
    elif db.query(User).filter(User.email == normalize_email(email)).first() is not None:
        error = "A user with that email already exists."
    if error is not None:
        return _render_admin_dashboard(
            request, db, session, error=error, form=form, status_code=400
        )

    user = create_user(db, name=name, email=email, password=password, role=role.strip())
    logger.info("User %s created user %s with role %s", session.user_id, user.id, user.role)
    return RedirectResponse(url=Destination.ADMIN_DASHBOARD.value, status_code=303)


@app.get("/dashboard/direction", response_class=HTMLResponse)
def direction_dashboard(request: Request, db: Session = Depends(get_db)):
    session = session_from_request(request, db)
    redirect_to = guard_redirect(session)
    if redirect_to is not None:
        return RedirectResponse(url=redirect_to)

    return templates.TemplateResponse(
        request,
        "dashboard_direction.html",
        {"user": session.user},
    )


@app.get(UNAUTHORIZED_PATH, response_class=HTMLResponse)
def unauthorized(request: Request):
    """Shown to signed-in users whose role has no access to the dashboard."""
    return templates.TemplateResponse(request, "unauthorized.html", {}, status_code=403)
