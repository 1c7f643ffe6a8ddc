"""
DevFlow Backend: Server-Rendered Pages
=======================================

What:  GET / renders the home page: static markup plus a greeting that
       depends on the current session.
How:   The session comes from the same dependency the API uses; the markup is
       a small HTML document built here with every dynamic value escaped.
Error Handling:
    None of its own. Rendering failures propagate to the global handler.
"""

import html
import logging
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse

from devflow.config import settings
from devflow.dependencies import get_current_session
from devflow.schemas.session import Session

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Pages"])

PAGE_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
  <head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1">
    <title>{title}</title>
  </head>
  <body>
    <main>
      <h1 class="text-5xl font-black text-violet-600">Welcome to the world of {title}</h1>
      <p class="greeting">{greeting}</p>
    </main>
  </body>
</html>
"""

SIGNED_OUT_GREETING = "You are not signed in."


def greeting_for(session: Optional[Session]) -> str:
    if session is None:
        return SIGNED_OUT_GREETING
    who = session.user.name or session.user.email or str(session.user.id)
    return f"Signed in as {who}"


def render_home_page(session: Optional[Session], title: Optional[str] = None) -> str:
    return PAGE_TEMPLATE.format(
        title=html.escape(title or settings.site_title),
        greeting=html.escape(greeting_for(session)),
    )


@router.get("/", response_class=HTMLResponse, summary="Home page")
async def home(session: Optional[Session] = Depends(get_current_session)) -> HTMLResponse:
    # User id only: names and e-mail addresses stay out of the logs
    logger.info("Rendering home page for %s", f"user {session.user.id}" if session else "anonymous visitor")
    return HTMLResponse(render_home_page(session))
