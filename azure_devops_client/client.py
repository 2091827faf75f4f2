"""Azure DevOps REST API client using httpx, with a self-imposed rate limit."""

import logging
import threading
import time

import httpx
from pydantic import ValidationError

from .errors import ConfigurationError, DeadlineExceeded, HTTPError, ResponseDecodeError
from .models import (
    API_VERSION,
    AzureDevOpsConnection,
    ListRepositoriesByProjectOrOrgArgs,
    ListRepositoriesResponse,
    RepositoriesValue,
    Response,
    T,
)
from .ratelimit import RateLimiter, RateLimiterRegistry
from .settings import get_registry

logger = logging.getLogger(__name__)

_default_http_client: httpx.Client | None = None
_default_http_client_lock = threading.Lock()


def get_default_http_client() -> httpx.Client:
    """Shared httpx client used when a caller doesn't bring their own."""
    global _default_http_client
    with _default_http_client_lock:
        if _default_http_client is None:
            _default_http_client = httpx.Client(timeout=30.0)
        return _default_http_client


def _parse_base_url(raw: str) -> httpx.URL:
    try:
        url = httpx.URL(raw)
    except httpx.InvalidURL as e:
        raise ConfigurationError(f"invalid Azure DevOps URL {raw!r}: {e}") from e
    if not url.is_absolute_url or not url.host:
        raise ConfigurationError(f"Azure DevOps URL must be absolute, got {raw!r}")
    return url


class Client:
    """Client for an Azure DevOps code host via the REST API.

    Every request is resolved against the connection's base URL, carries
    Basic auth built from the connection's username and token, and waits on
    the limiter registered for `urn`. Clients sharing a `urn` (and registry)
    share that limiter.
    """

    def __init__(
        self,
        urn: str,
        config: AzureDevOpsConnection,
        http_client: httpx.Client | None = None,
        *,
        registry: RateLimiterRegistry | None = None,
    ):
        self.url = _parse_base_url(config.url)
        self.config = config
        self.urn = urn
        self._http = http_client or get_default_http_client()
        self._rate_limit = (registry or get_registry()).get(urn)
        self._auth = httpx.BasicAuth(username=config.username, password=config.token)
        logger.debug("Created Azure DevOps client %s for %s", urn, self.url)

    @property
    def rate_limiter(self) -> RateLimiter:
        return self._rate_limit

    def list_repositories_by_project_or_org(
        self,
        args: ListRepositoriesByProjectOrOrgArgs,
        *,
        cancel: threading.Event | None = None,
        timeout: float | None = None,
    ) -> list[RepositoriesValue]:
        """List the repositories of an org ("org") or a project ("org/project").

        Returns the repositories in the order the API returned them.
        """
        url = httpx.URL(
            f"{args.project_or_org_name}/_apis/git/repositories",
            params={"api-version": API_VERSION},
        )
        request = httpx.Request("GET", url)

        resp = self._do(request, ListRepositoriesResponse, cancel=cancel, timeout=timeout)
        return resp.result.value

    def _authenticate(self, request: httpx.Request) -> None:
        # Basic auth sets its header on the first step of the flow and never
        # needs to see a response.
        next(self._auth.sync_auth_flow(request))

    def _do(
        self,
        request: httpx.Request,
        result_type: type[T],
        *,
        cancel: threading.Event | None = None,
        timeout: float | None = None,
    ) -> Response[T]:
        """Send a base-URL-relative request and decode its JSON body into `result_type`.

        Args:
            request: Request whose URL is resolved against the client's base URL
            result_type: Pydantic model the response body is validated into
            cancel: Event that aborts the rate limit wait when set
            timeout: Seconds the whole call may take, rate limit wait included

        Returns:
            Response with the status, headers and decoded result.

        Raises:
            WaitCancelled, DeadlineExceeded: before any HTTP call is made.
            httpx.HTTPError: transport failures, unchanged.
            HTTPError: status outside [200, 400); the body is not decoded.
            ResponseDecodeError: body doesn't validate into `result_type`.
        """
        deadline = time.monotonic() + timeout if timeout is not None else None

        request.url = self.url.join(request.url)
        request.headers["Host"] = request.url.netloc.decode("ascii")
        self._authenticate(request)

        self._rate_limit.wait(cancel=cancel, timeout=timeout)

        if deadline is not None:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise DeadlineExceeded(f"deadline passed before sending {request.method} {request.url}")
            request.extensions["timeout"] = httpx.Timeout(remaining).as_dict()
        else:
            request.extensions.setdefault("timeout", self._http.timeout.as_dict())

        resp = self._http.send(request, stream=True)
        try:
            body = resp.read()
        finally:
            resp.close()
        logger.debug("%s %s -> %d", request.method, request.url, resp.status_code)

        if resp.status_code < 200 or resp.status_code >= 400:
            raise HTTPError(status_code=resp.status_code, url=request.url, body=body)

        try:
            result = result_type.model_validate_json(body)
        except ValidationError as e:
            raise ResponseDecodeError(
                status_code=resp.status_code,
                url=request.url,
                headers=resp.headers,
                message=f"{e.error_count()} validation error(s)",
            ) from e

        return Response(status_code=resp.status_code, headers=resp.headers, result=result)

