from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import RedirectResponse
from fastapi.routing import APIRoute

router = APIRouter(include_in_schema=False)


def _owned_methods(request: Request, path: str) -> set[str]:
    methods: set[str] = set()
    for route in request.app.routes:
        if isinstance(route, APIRoute) and route.path == path and route.include_in_schema:
            methods |= route.methods
    return methods


def _redirect_home(request: Request) -> RedirectResponse:
    homepage_url = request.app.state.settings.homepage_url
    if not homepage_url:
        raise HTTPException(status_code=404, detail="Not Found")
    return RedirectResponse(homepage_url, status_code=307)


@router.get("/")
def root(request: Request) -> RedirectResponse:
    return _redirect_home(request)


@router.get("/{path:path}")
def anything_else(request: Request, path: str) -> RedirectResponse:
    """Send browsers that wander off the API to the project homepage."""
    methods = _owned_methods(request, "/" + path)
    if methods:
        raise HTTPException(
            status_code=405,
            detail="Method Not Allowed",
            headers={"Allow": ", ".join(sorted(methods))},
        )
    if path.startswith("api/"):
        raise HTTPException(status_code=404, detail="Not Found")
    return _redirect_home(request)
