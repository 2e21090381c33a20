"""
WebFinger server: OpenID Connect issuer discovery for a single configured account.
GET /.well-known/webfinger, GET /_healthz; everything else is 404.
Port 8080 unless WEBFINGER_PORT says otherwise.
"""
import logging
import sys
from http import HTTPStatus

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from webfinger_server.config import BUILD, HOST, LOG_LEVEL, PORT, Config, ConfigError, load_config
from webfinger_server.webfinger import WebFingerError, router as webfinger_router

logger = logging.getLogger(__name__)


def plain_text_response(message: str, status_code: int, headers: dict | None = None) -> PlainTextResponse:
    """Plain-text body; nosniff so browsers never render it as HTML."""
    response = PlainTextResponse(message, status_code=status_code, headers=headers)
    response.headers["X-Content-Type-Options"] = "nosniff"
    return response


async def webfinger_error_handler(request: Request, exc: WebFingerError):
    return plain_text_response(exc.message, exc.status_code)


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    """Unrouted paths and framework errors: "<code> <phrase>", e.g. "404 Not Found"."""
    return plain_text_response(
        f"{exc.status_code} {HTTPStatus(exc.status_code).phrase}",
        exc.status_code,
        headers=getattr(exc, "headers", None),
    )


def create_app(config: Config) -> FastAPI:
    """Build the app around an already validated Config (shared read-only by all requests)."""
    app = FastAPI(
        title="WebFinger Server",
        version="0.1.0",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        redirect_slashes=False,
    )
    app.state.config = config
    app.add_exception_handler(WebFingerError, webfinger_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.include_router(webfinger_router, tags=["webfinger"])

    @app.api_route("/_healthz", methods=["GET", "HEAD"], response_class=PlainTextResponse)
    def healthz():
        """Liveness probe."""
        return plain_text_response("200 OK", 200)

    @app.get("/", response_class=PlainTextResponse)
    def root():
        return plain_text_response("404 Not Found", 404)

    return app


def main() -> None:
    """Validate configuration, then serve. Exits with status 1 on a configuration error."""
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        config = load_config()
    except ConfigError as e:
        logger.error("Configuration error: %s", e)
        sys.exit(1)

    logger.info("Webfinger server build %s", BUILD)
    logger.info("Server starting on port %d...", PORT)
    uvicorn.run(create_app(config), host=HOST, port=PORT, log_level=LOG_LEVEL.lower())


if __name__ == "__main__":
    main()
