"""
WebFinger endpoint (RFC 7033): GET /.well-known/webfinger?resource=acct:...
Answers only for the configured account (or, in wildcard mode, any account at its domain)
with a JRD carrying the OpenID Connect issuer link.
"""
import logging
import re
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from webfinger_server.config import Config

logger = logging.getLogger(__name__)

OIDC_ISSUER_REL = "http://openid.net/specs/connect/1.0/issuer"
JRD_MEDIA_TYPE = "application/jrd+json"

# Same grammar as the configured resource, capturing the domain
ACCT_DOMAIN_PATTERN = re.compile(r"acct:[a-zA-Z0-9._%+-]+@([a-zA-Z0-9.-]+\.[a-zA-Z]{2,})")


class Link(BaseModel):
    rel: str
    type: str | None = None
    href: str | None = None


class JRD(BaseModel):
    """JSON Resource Descriptor, trimmed to what issuer discovery needs."""

    subject: str
    links: list[Link]


class WebFingerError(Exception):
    """Request can't be answered; rendered as a plain-text response with status_code."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


def extract_domain(acct_resource: str) -> str:
    """Domain part of an acct: URI. Raises ValueError if the URI is malformed."""
    match = ACCT_DOMAIN_PATTERN.fullmatch(acct_resource)
    if match is None:
        raise ValueError(f"invalid acct resource format: {acct_resource}")
    return match.group(1)


def resolve_resource(requested: str | None, config: Config) -> JRD:
    """
    Match the requested resource against the configuration and build the JRD.
    Exact match by default; with allow_domain_wildcard any local part at the configured
    domain is served. The subject echoes the requested value, not the configured one.
    """
    if not requested:
        raise WebFingerError(400, "Missing resource parameter")

    if config.allow_domain_wildcard:
        try:
            requested_domain = extract_domain(requested)
        except ValueError:
            raise WebFingerError(400, "Invalid resource format")
        try:
            configured_domain = extract_domain(config.resource)
        except ValueError:
            # Config is validated at startup, so this means that validation is broken
            logger.error("Configured resource %r has no extractable domain", config.resource)
            raise WebFingerError(500, "Internal server error: invalid configured resource")
        if requested_domain != configured_domain:
            logger.debug("Domain %s does not match configured domain", requested_domain)
            raise WebFingerError(404, "Resource not found")
    elif requested != config.resource:
        logger.debug("Resource %s does not match configured resource", requested)
        raise WebFingerError(404, "Resource not found")

    return JRD(
        subject=requested,
        links=[Link(rel=OIDC_ISSUER_REL, href=config.issuer_url)],
    )


def get_config(request: Request) -> Config:
    """Dependency: the Config the app was created with."""
    return request.app.state.config


router = APIRouter()


@router.get("/.well-known/webfinger")
def webfinger(request: Request, config: Annotated[Config, Depends(get_config)]):
    """
    WebFinger lookup. The resource value is only compared, never reflected into HTML;
    the JRD media type keeps browsers from sniffing it as a page.
    """
    # First value wins if the parameter is repeated
    values = request.query_params.getlist("resource")
    resource = values[0] if values else None
    jrd = resolve_resource(resource, config)
    return JSONResponse(jrd.model_dump(exclude_none=True), media_type=JRD_MEDIA_TYPE)
