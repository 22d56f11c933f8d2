from fastapi import Request, status
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates
from functools import wraps
from typing import Callable, Any
import logging

# Set up Jinja2Templates (adjust the directory if needed)
templates = Jinja2Templates(directory="templates")


def render_template(
    request: Request, template_name: str, context: dict = None, status_code: int = 200
):
    """
    Renders a Jinja2 template with the given context.
    """
    if context is None:
        context = {}
    return templates.TemplateResponse(
        request, template_name, context, status_code=status_code
    )


def format_amount(unit_amount, currency) -> str:
    """Stripe amounts are in the smallest currency unit"""
    if unit_amount is None:
        return ""
    return f"{unit_amount / 100:,.2f} {(currency or '').upper()}".strip()


templates.env.filters["amount"] = format_amount


def require_auth(func: Callable) -> Callable:
    """
    Decorator to ensure the user is signed in.
    Redirects to the sign-in page if there is no session.
    """

    @wraps(func)
    async def wrapper(*args, **kwargs) -> Any:
        current_session = kwargs.get("current_session")
        if not current_session:
            logging.warning("User not authenticated, redirecting to sign in.")
            return RedirectResponse(
                url="/signin?message=Your session has expired",
                status_code=status.HTTP_302_FOUND,
            )
        return await func(*args, **kwargs)

    return wrapper
