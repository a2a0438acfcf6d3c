import base64
import os
from dataclasses import dataclass

from gql import Client
from gql.transport.requests import RequestsHTTPTransport

GRAPHQL_PATH = "/Manager/graphql"
DEFAULT_TIMEOUT = 30

URL_ENV = "DASH_ENTERPRISE_URL"
USERNAME_ENV = "DASH_ENTERPRISE_USERNAME"
API_KEY_ENV = "DASH_ENTERPRISE_API_KEY"
INSECURE_ENV = "DASH_ENTERPRISE_INSECURE"
TIMEOUT_ENV = "DASH_ENTERPRISE_TIMEOUT"

TRUTHY = {"1", "true", "yes", "on"}


class DDSClientError(Exception):
    """Base class for errors reported to the user before or instead of a request."""


class ConfigurationError(DDSClientError, EnvironmentError):
    pass


class ArgumentError(DDSClientError, ValueError):
    pass


@dataclass(frozen=True)
class Config:
    url: str
    username: str
    api_key: str
    verify_tls: bool = True
    timeout: int = DEFAULT_TIMEOUT

    @property
    def endpoint(self):
        return self.url.rstrip("/") + GRAPHQL_PATH

    @property
    def basic_auth(self):
        """Base64 of username:api_key, as sent in the Authorization header."""
        token = f"{self.username}:{self.api_key}".encode("utf-8")
        return base64.b64encode(token).decode("ascii")

    def headers(self):
        return {
            "Authorization": f"Basic {self.basic_auth}",
            "Cache-Control": "no-cache",
        }


def load_config(environ=None, insecure=False):
    """Build a Config from the environment, failing on the first missing variable."""
    environ = os.environ if environ is None else environ

    values = {}
    for key in (URL_ENV, USERNAME_ENV, API_KEY_ENV):
        value = environ.get(key)
        if not value:
            raise ConfigurationError(f"{key} environment variable not defined")
        values[key] = value

    raw_timeout = environ.get(TIMEOUT_ENV)
    try:
        timeout = int(raw_timeout) if raw_timeout else DEFAULT_TIMEOUT
    except ValueError:
        raise ConfigurationError(f"{TIMEOUT_ENV} must be an integer, got {raw_timeout!r}") from None
    if timeout <= 0:
        raise ConfigurationError(f"{TIMEOUT_ENV} must be a positive integer, got {raw_timeout!r}")

    if environ.get(INSECURE_ENV, "").strip().lower() in TRUTHY:
        insecure = True

    return Config(
        url=values[URL_ENV],
        username=values[USERNAME_ENV],
        api_key=values[API_KEY_ENV],
        verify_tls=not insecure,
        timeout=timeout,
    )


def get_client(config):
    transport = RequestsHTTPTransport(
        url=config.endpoint,
        headers={
            "Content-type": "application/json",
            "Accept": "application/json",
            **config.headers(),
        },
        use_json=True,
        verify=config.verify_tls,
        timeout=config.timeout,
        retries=0,
    )
    return Client(transport=transport)
