"""
WebFinger server configuration.
The served identity and issuer come from the environment and are validated once at startup;
a bad value aborts the process before any request is served.
"""
import os
import re
from collections.abc import Mapping
from dataclasses import dataclass

ENV_RESOURCE = "WEBFINGER_RESOURCE"
ENV_ISSUER_URL = "WEBFINGER_ISSUER_URL"
ENV_ALLOW_DOMAIN_WILDCARD = "WEBFINGER_ALLOW_DOMAIN_WILDCARD"

# acct:user@domain.tld
RESOURCE_PATTERN = re.compile(r"acct:[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
# http(s):// followed by a non-empty host
ISSUER_URL_PATTERN = re.compile(r"https?://[^\t\n\f\r /$.?#][^\t\n\f\r ]*")

# Listener and logging (not part of the served identity)
HOST = os.environ.get("WEBFINGER_HOST", "0.0.0.0")
PORT = int(os.environ.get("WEBFINGER_PORT", "8080"))
LOG_LEVEL = os.environ.get("WEBFINGER_LOG_LEVEL", "INFO").upper()

# Build label shown in the startup banner; set by the image build
BUILD = os.environ.get("WEBFINGER_BUILD", "dev")


class ConfigError(ValueError):
    """A required environment value is missing or malformed."""

    def __init__(self, field: str, reason: str, message: str):
        super().__init__(message)
        self.field = field
        self.reason = reason


@dataclass(frozen=True)
class Config:
    resource: str
    issuer_url: str
    allow_domain_wildcard: bool = False


def load_config(environ: Mapping[str, str] | None = None) -> Config:
    """
    Read and validate the WEBFINGER_* variables. Raises ConfigError on the first problem found.
    `environ` defaults to os.environ; tests pass a plain dict.
    """
    if environ is None:
        environ = os.environ

    resource = environ.get(ENV_RESOURCE, "")
    if not resource:
        raise ConfigError(ENV_RESOURCE, "missing", f"{ENV_RESOURCE} environment variable not set")

    issuer_url = environ.get(ENV_ISSUER_URL, "")
    if not issuer_url:
        raise ConfigError(ENV_ISSUER_URL, "missing", f"{ENV_ISSUER_URL} environment variable not set")

    # Only these two literals enable wildcard mode
    allow_domain_wildcard = environ.get(ENV_ALLOW_DOMAIN_WILDCARD) in ("true", "TRUE")

    if not RESOURCE_PATTERN.fullmatch(resource):
        raise ConfigError(
            ENV_RESOURCE, "malformed", f"{ENV_RESOURCE} is not in the format acct:user@domain.com"
        )

    if not ISSUER_URL_PATTERN.fullmatch(issuer_url):
        raise ConfigError(ENV_ISSUER_URL, "malformed", f"{ENV_ISSUER_URL} is not a valid URL")

    return Config(
        resource=resource,
        issuer_url=issuer_url,
        allow_domain_wildcard=allow_domain_wildcard,
    )
