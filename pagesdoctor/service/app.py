"""FastAPI application exposing the diagnostic and remediation engines."""

from __future__ import annotations

import asyncio
import functools
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, Callable, Dict, Optional, TypeVar

from fastapi import APIRouter, Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from ..config import PagesDoctorConfig, load_config
from ..diagnostics import Diagnostician, Reachability
from ..errors import GitHubError, InvalidInputError, UnfixableIssueError
from ..github.client import GitHubClient
from ..logging import get_logger
from ..reachability import SiteChecker
from ..remediation import Remediator
from ..validation import ISSUE_ID_REQUIRED, OWNER_REQUIRED, REPO_REQUIRED

logger = get_logger("service")

T = TypeVar("T")

_FIELD_MESSAGES = {
    "owner": OWNER_REQUIRED,
    "repo": REPO_REQUIRED,
    "issueId": ISSUE_ID_REQUIRED,
}


class RepositoryRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    owner: str = Field(min_length=1)
    repo: str = Field(min_length=1)


class FixIssueRequest(RepositoryRequest):
    issue_id: str = Field(alias="issueId", min_length=1)


class HealthResponse(BaseModel):
    status: str


class ActionResponse(BaseModel):
    success: bool
    message: str


class FixAllResponse(ActionResponse):
    fixedIssues: list[str]


def _run_blocking(func: Callable[..., T], *args: Any) -> "asyncio.Future[T]":
    loop = asyncio.get_running_loop()
    return loop.run_in_executor(None, functools.partial(func, *args))


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _first_validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid input"
    first = errors[0]
    loc = first.get("loc") or ()
    field_name = str(loc[-1]) if loc else ""
    return _FIELD_MESSAGES.get(field_name, "Invalid input")


def _build_router() -> APIRouter:
    router = APIRouter()

    def get_diagnostician(request: Request) -> Diagnostician:
        return Diagnostician(
            request.app.state.github_client, request.app.state.site_checker
        )

    def get_remediator(request: Request) -> Remediator:
        return Remediator(request.app.state.github_client)

    @router.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @router.post("/connect")
    async def connect(
        payload: RepositoryRequest,
        remediator: Remediator = Depends(get_remediator),
    ) -> Dict[str, Any]:
        repository = await _run_blocking(remediator.connect, payload.owner, payload.repo)
        return {"success": True, "repository": repository.to_dict()}

    @router.get("/diagnose")
    async def diagnose(
        owner: str = Query(default=""),
        repo: str = Query(default=""),
        diagnostician: Diagnostician = Depends(get_diagnostician),
    ) -> Dict[str, Any]:
        report = await _run_blocking(diagnostician.diagnose, owner, repo)
        return report.to_dict()

    @router.post("/fix-issue", response_model=ActionResponse)
    async def fix_issue(
        payload: FixIssueRequest,
        remediator: Remediator = Depends(get_remediator),
    ) -> ActionResponse:
        result = await _run_blocking(
            remediator.fix_issue, payload.owner, payload.repo, payload.issue_id
        )
        return ActionResponse(success=True, message=result.message)

    @router.post("/fix-all", response_model=FixAllResponse)
    async def fix_all(
        payload: RepositoryRequest,
        remediator: Remediator = Depends(get_remediator),
    ) -> FixAllResponse:
        result = await _run_blocking(remediator.fix_all, payload.owner, payload.repo)
        return FixAllResponse(
            success=True, message=result.message, fixedIssues=result.fixed_issues
        )

    @router.post("/trigger-rebuild", response_model=ActionResponse)
    async def trigger_rebuild(
        payload: RepositoryRequest,
        remediator: Remediator = Depends(get_remediator),
    ) -> ActionResponse:
        result = await _run_blocking(
            remediator.trigger_rebuild, payload.owner, payload.repo
        )
        return ActionResponse(success=True, message=result.message)

    return router


def create_app(
    config: Optional[PagesDoctorConfig] = None,
    *,
    github_client: Optional[GitHubClient] = None,
    site_checker: Optional[Reachability] = None,
) -> FastAPI:
    """Create the FastAPI application.

    The GitHub client and site checker are built once here and shared by every
    request. Collaborators passed in by the caller stay owned by the caller;
    the ones built here are closed on shutdown.
    """
    if config is None:
        config = load_config(Path.cwd())

    owned: list[Any] = []
    if github_client is None:
        github_client = GitHubClient.from_config(config.github)
        owned.append(github_client)
    if site_checker is None:
        site_checker = SiteChecker(timeout=config.site.timeout)
        owned.append(site_checker)

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        yield
        for resource in owned:
            resource.close()

    app = FastAPI(title="pagesdoctor", version="1.0.0", lifespan=lifespan)
    app.state.github_client = github_client
    app.state.site_checker = site_checker

    router = _build_router()
    app.include_router(router)
    app.include_router(router, prefix="/api")

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        _: Any, exc: RequestValidationError
    ) -> JSONResponse:
        return _error(400, _first_validation_message(exc))

    @app.exception_handler(InvalidInputError)
    async def invalid_input_handler(_: Any, exc: InvalidInputError) -> JSONResponse:
        return _error(400, str(exc))

    @app.exception_handler(UnfixableIssueError)
    async def unfixable_handler(_: Any, exc: UnfixableIssueError) -> JSONResponse:
        return _error(400, str(exc))

    @app.exception_handler(GitHubError)
    async def github_error_handler(_: Any, exc: GitHubError) -> JSONResponse:
        logger.error("GitHub API failure: %s", exc)
        return _error(500, str(exc) or "GitHub API request failed")

    @app.exception_handler(Exception)
    async def unexpected_error_handler(
        _: Any, exc: Exception
    ) -> JSONResponse:  # pragma: no cover - simple mapping
        logger.exception("Unexpected failure handling request")
        return _error(500, str(exc) or "Unexpected server error")

    return app


def run_service(
    config: Optional[PagesDoctorConfig] = None,
    *,
    host: Optional[str] = None,
    port: Optional[int] = None,
) -> None:  # pragma: no cover - integration path
    import uvicorn

    if config is None:
        config = load_config(Path.cwd())
    app = create_app(config)
    uvicorn.run(
        app,
        host=host or config.service.host,
        port=port or config.service.port,
    )


__all__ = ["create_app", "run_service"]
