"""
aiohttp web integration for errkit errors.

This module turns failures raised by request handlers into JSON error
responses, classifying foreign exceptions first so every response carries
a code and a status.
"""

import functools
from typing import Awaitable, Callable

from aiohttp import web

from ..core.exceptions import classify_exception
from ..utils.formatting import format_error

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


def error_response(error: BaseException) -> web.Response:
    """
    Build the JSON response for a failure.

    The body is ``{"error": {"message", "code", "details"?, "stack"?}}``.
    """
    formatted = format_error(classify_exception(error))

    body = {
        "message": formatted["message"],
        "code": formatted["code"],
    }
    if formatted.get("details") is not None:
        body["details"] = formatted["details"]
    if formatted.get("stack") is not None:
        body["stack"] = formatted["stack"]

    return web.json_response({"error": body}, status=formatted["status_code"] or 500)


@web.middleware
async def error_middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
    """Application middleware converting handler failures into error responses."""
    try:
        return await handler(request)
    except web.HTTPException:
        # aiohttp's own responses (redirects, 404 routing, ...) pass through
        raise
    except Exception as exc:
        return error_response(exc)


def async_handler(fn: Handler) -> Handler:
    """
    Wrap a single handler so its failures become error responses.

    For applications that do not install error_middleware.
    """

    @functools.wraps(fn)
    async def wrapper(request: web.Request) -> web.StreamResponse:
        try:
            return await fn(request)
        except web.HTTPException:
            raise
        except Exception as exc:
            return error_response(exc)

    return wrapper


def setup_error_handling(app: web.Application) -> web.Application:
    """Install error_middleware on an application."""
    app.middlewares.append(error_middleware)
    return app
