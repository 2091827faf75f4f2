"""Errors raised by the Azure DevOps client."""

import json

import httpx


class AzureDevOpsError(Exception):
    """Base class for errors raised by this package."""


class ConfigurationError(AzureDevOpsError, ValueError):
    """The connection config can't be used, e.g. the base URL doesn't parse."""


class WaitCancelled(AzureDevOpsError):
    """The caller cancelled while waiting on the rate limiter."""


class DeadlineExceeded(AzureDevOpsError, TimeoutError):
    """The rate limiter could not grant a token before the caller's deadline."""


class HTTPError(AzureDevOpsError):
    """Response status outside [200, 400)."""

    def __init__(self, status_code: int, url: httpx.URL, body: bytes):
        self.status_code = status_code
        self.url = url
        self.body = body
        super().__init__(str(self))

    def __str__(self):
        url = json.dumps(str(self.url), ensure_ascii=False)
        body = json.dumps(self.body.decode("utf-8", errors="replace"), ensure_ascii=False)
        return f"Azure DevOps API HTTP error: code={self.status_code} url={url} body={body}"


class ResponseDecodeError(AzureDevOpsError):
    """A successful response whose body didn't decode into the expected shape.

    The response headers stay available for inspection. The underlying
    decode error is chained as __cause__.
    """

    def __init__(self, status_code: int, url: httpx.URL, headers: httpx.Headers, message: str):
        self.status_code = status_code
        self.url = url
        self.headers = headers
        super().__init__(f"failed to decode response from {url}: {message}")
