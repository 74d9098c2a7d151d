"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    CONNECTION_ERROR = 2
    CONFIG_ERROR = 3


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    DEFAULT_PUBLIC_HOST = "goclone.zone"
    DEFAULT_UPSTREAM = "https://proxy.golang.org"
    DEFAULT_LISTEN_HOST = "0.0.0.0"
    DEFAULT_PORT = 8080

    # Serving prefix for the module proxy protocol; also reserved as an
    # isolation segment name.
    PROXY_PREFIX = "_mod"
    VERSION_SEPARATOR = "/@v/"
    ISOLATION_MARKER = "_"

    MANIFEST_NAME = "go.mod"
    SOURCE_SUFFIX = ".go"
    RECURSIVE_ANNOTATION = "goclone:recursive"

    ENV_PUBLIC_HOST = "GOCLONE_HOST"
    ENV_UPSTREAM = "GOCLONE_UPSTREAM"
    ENV_PORT = "PORT"
    ENV_LOG_LEVEL = "GOCLONE_LOG_LEVEL"
    ENV_LAMBDA_RUNTIME_API = "AWS_LAMBDA_RUNTIME_API"

    LAMBDA_RUNTIME_VERSION = "2018-06-01"
    USER_AGENT = "goclone-proxy/1.0"
    LOG_FORMAT = "[%(levelname)s] %(message)s"
    REQUEST_TIMEOUT = 30  # Timeout in seconds for all HTTP requests
    HOMEPAGE = "https://github.com/dnr/goclone"
