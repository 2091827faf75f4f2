"""Authenticated, rate-limited client for the Azure DevOps REST API.

Requests are resolved against the connection's base URL, signed with Basic
auth, and spaced out by a token bucket shared per connection identifier.
"""

from .cli import main
from .client import Client
from .errors import (
    AzureDevOpsError,
    ConfigurationError,
    DeadlineExceeded,
    HTTPError,
    ResponseDecodeError,
    WaitCancelled,
)
from .models import (
    AzureDevOpsConnection,
    ListRepositoriesByProjectOrOrgArgs,
    ListRepositoriesResponse,
    RepositoriesValue,
    Response,
)
from .ratelimit import RateLimiter, RateLimiterRegistry

__all__ = [
    "main",
    "Client",
    "AzureDevOpsConnection",
    "ListRepositoriesByProjectOrOrgArgs",
    "ListRepositoriesResponse",
    "RepositoriesValue",
    "Response",
    "RateLimiter",
    "RateLimiterRegistry",
    "AzureDevOpsError",
    "ConfigurationError",
    "DeadlineExceeded",
    "HTTPError",
    "ResponseDecodeError",
    "WaitCancelled",
]

if __name__ == "__main__":
    main()
