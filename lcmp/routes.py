"""HTTP routes of the device application interface (Dev App API)."""

import logging
from typing import Callable, Iterable

from pydantic import ValidationError
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import BaseRoute, Route

from lcmp.errors import LcmpError
from lcmp.lcmp_server import LcmpServer
from lcmp.messages import AppContext, ApplicationListFilter, ProblemDetails

logger = logging.getLogger(__name__)

API_ROOT = "/dev_app/v1"
PROBLEM_MEDIA_TYPE = "application/problem+json"


def problem_details_response(status_code: int, detail: str) -> JSONResponse:
    """Error response with a ProblemDetails body."""
    problem = ProblemDetails(status=status_code, detail=detail)
    return JSONResponse(problem.to_wire(), status_code=status_code, media_type=PROBLEM_MEDIA_TYPE)


def _lcmp(request: Request) -> LcmpServer:
    return request.app.state.lcmp


def _with_error_handling(operation: str, action: Callable[[], Response]) -> Response:
    try:
        return action()
    except LcmpError as exc:
        logger.warning(
            "%s rejected",
            operation,
            extra={"kind": exc.kind.value, "error": exc.message},
        )
        return problem_details_response(exc.http_status, exc.message)


async def _read_app_context(request: Request) -> AppContext:
    return AppContext.model_validate_json(await request.body())


async def app_list(request: Request) -> Response:
    """GET /app_list"""
    try:
        criteria = ApplicationListFilter.model_validate(dict(request.query_params))
    except ValidationError as exc:
        return problem_details_response(400, str(exc))

    def _call() -> Response:
        result = _lcmp(request).application_list.query(criteria)
        return JSONResponse(result.to_wire())

    return _with_error_handling("app_list", _call)


async def create_app_context(request: Request) -> Response:
    """POST /app_contexts"""
    try:
        app_context = await _read_app_context(request)
    except ValidationError as exc:
        return problem_details_response(400, str(exc))

    def _call() -> Response:
        created = _lcmp(request).app_context.new_context(app_context)
        location = request.url_for("app_context", contextId=created.context_id)
        return JSONResponse(
            created.to_wire(),
            status_code=201,
            headers={"Location": str(location)},
        )

    return _with_error_handling("new_context", _call)


async def get_app_context(request: Request) -> Response:
    """GET /app_contexts/{contextId}, not part of the standard API."""
    context_id = request.path_params["contextId"]

    def _call() -> Response:
        app_context = _lcmp(request).app_context.get_context(context_id)
        return JSONResponse(app_context.to_wire())

    return _with_error_handling("get_context", _call)


async def update_app_context(request: Request) -> Response:
    """PUT /app_contexts/{contextId}"""
    context_id = request.path_params["contextId"]
    try:
        app_context = await _read_app_context(request)
    except ValidationError as exc:
        return problem_details_response(400, str(exc))
    if app_context.context_id is None:
        app_context = app_context.model_copy(update={"context_id": context_id})
    elif app_context.context_id != context_id:
        return problem_details_response(400, "context ID in the request does not match the path")

    def _call() -> Response:
        _lcmp(request).app_context.update_context(app_context)
        return Response(status_code=204)

    return _with_error_handling("update_context", _call)


async def delete_app_context(request: Request) -> Response:
    """DELETE /app_contexts/{contextId}"""
    context_id = request.path_params["contextId"]

    def _call() -> Response:
        _lcmp(request).app_context.del_context(context_id)
        return Response(status_code=204)

    return _with_error_handling("del_context", _call)


async def health(request: Request) -> Response:
    report = _lcmp(request).status()
    healthy = all(value == "ok" for value in report.values())
    return JSONResponse(
        {"status": "ok" if healthy else "degraded", "components": report},
        status_code=200 if healthy else 503,
    )


async def _unhandled_error(request: Request, exc: Exception) -> Response:
    logger.exception(
        "Unhandled error while serving request",
        extra={"method": request.method, "path": request.url.path},
    )
    return problem_details_response(500, "Internal Server Error")


def create_http_app(lcmp: LcmpServer, extra_routes: Iterable[BaseRoute] = ()) -> Starlette:
    """Starlette application exposing ``lcmp`` through the Dev App API."""
    routes: list[BaseRoute] = [
        Route(f"{API_ROOT}/app_list", app_list, methods=["GET"]),
        Route(f"{API_ROOT}/app_contexts", create_app_context, methods=["POST"]),
        Route(
            f"{API_ROOT}/app_contexts/{{contextId}}",
            get_app_context,
            methods=["GET"],
            name="app_context",
        ),
        Route(f"{API_ROOT}/app_contexts/{{contextId}}", update_app_context, methods=["PUT"]),
        Route(f"{API_ROOT}/app_contexts/{{contextId}}", delete_app_context, methods=["DELETE"]),
        Route("/health", health, methods=["GET"]),
        *extra_routes,
    ]
    app = Starlette(routes=routes, exception_handlers={Exception: _unhandled_error})
    app.state.lcmp = lcmp
    return app
