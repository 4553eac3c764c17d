"""FastAPI application for the fencediv local JSON API."""

import secrets
from typing import Any

from fastapi import Depends, FastAPI, HTTPException, Security
from fastapi.middleware.cors import CORSMiddleware
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel

from .. import __version__
from ..core.model import Range
from ..core.parser import parse_fenced_divs, split_lines
from ..serialize import div_to_dict, info_to_dict
from ..settings import StylingRule


class ParseRequest(BaseModel):
    text: str


class RenderRequest(BaseModel):
    text: str
    selection: list[tuple[int, int]] | None = None  # omitted means a caret at 0


class RuleBody(BaseModel):
    type: str
    name: str
    style: str


def create_app(runtime: Any, token: str | None = None, enable_cors: bool = False) -> Any:
    """
    Create FastAPI application with runtime injected.

    Args:
        runtime: Runtime instance with settings and renderer
        token: Bearer token for authentication (None to disable auth)
        enable_cors: Enable CORS middleware

    Returns:
        FastAPI application instance
    """
    app = FastAPI(
        title="fencediv API",
        description="Local JSON API for fenced div parsing and rendering",
        version=__version__,
        docs_url="/docs" if token is None else None,
        redoc_url="/redoc" if token is None else None,
    )

    if enable_cors:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    if token:
        security_scheme = HTTPBearer(auto_error=False)

        async def verify_token(
            credentials: HTTPAuthorizationCredentials | None = Security(security_scheme),  # noqa: B008
        ) -> None:
            """Verify bearer token."""
            if credentials is None or credentials.credentials != token:
                raise HTTPException(status_code=401, detail="Invalid or missing token")
    else:

        async def verify_token() -> None:
            """No-op when auth is disabled."""
            return None

    @app.get("/health")
    async def health(auth: None = Depends(verify_token)) -> dict[str, Any]:
        """Health check endpoint."""
        return {"status": "ok", "version": __version__}

    @app.post("/parse")
    async def parse(req: ParseRequest, auth: None = Depends(verify_token)) -> dict[str, Any]:
        """Full region tree of a document, nothing filtered."""
        regions = [info_to_dict(info) for info in parse_fenced_divs(split_lines(req.text))]
        return {"regions": regions}

    @app.post("/render")
    async def render(req: RenderRequest, auth: None = Depends(verify_token)) -> dict[str, Any]:
        """Render the divs the selection leaves untouched."""
        selection = None if req.selection is None else [Range(a, b) for a, b in req.selection]
        session = runtime.open_session(req.text, selection)
        return {
            "regions": len(session.parsed),
            "divs": [
                {"div": div_to_dict(d.div), "html": d.html} for d in session.decorations
            ],
        }

    @app.get("/rules")
    async def list_rules(auth: None = Depends(verify_token)) -> dict[str, Any]:
        """Current style settings."""
        return runtime.settings.to_serializable()

    @app.put("/rules/{rule_id}")
    async def put_rule(
        rule_id: str, body: RuleBody, auth: None = Depends(verify_token)
    ) -> dict[str, Any]:
        """Create or replace a styling rule."""
        try:
            rule = StylingRule(body.type, body.name, body.style)  # type: ignore[arg-type]
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e
        if rule.is_empty():
            raise HTTPException(status_code=400, detail="Rule name and style must be non-empty")
        runtime.settings.set_rule(rule_id, rule)
        runtime.save_settings()
        return {"id": rule_id, **rule.to_dict()}

    @app.delete("/rules/{rule_id}")
    async def delete_rule(rule_id: str, auth: None = Depends(verify_token)) -> dict[str, Any]:
        """Delete a styling rule."""
        if not runtime.settings.delete_rule(rule_id):
            raise HTTPException(status_code=404, detail=f"Rule {rule_id} not found")
        runtime.save_settings()
        return {"deleted": rule_id}

    return app


def generate_token() -> str:
    """Generate a random bearer token."""
    return secrets.token_urlsafe(32)
