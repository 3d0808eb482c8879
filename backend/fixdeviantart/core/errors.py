"""
Error taxonomy for the embed proxy.

Every failure that can end a request is a ProxyError carrying the HTTP status
and the generic message shown to the client. Internal detail travels in the
exception message and ``__cause__`` and only ever reaches the logs.

- UpstreamRequestError: building or sending a request to DeviantArt failed,
  the response status was not 2xx, or the request deadline expired
- UpstreamDecodeError: the oEmbed body was not JSON or did not match the schema
- ResolutionFailure: the film player scrape failed (recovered locally)
- RenderError: the embed template could not be compiled or executed
"""

from fastapi import status


class ProxyError(Exception):
    """Base exception for request-terminating proxy errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    public_message: str = "internal server error"

    def __init__(self, detail: str, public_message: str | None = None) -> None:
        super().__init__(detail)
        self.detail = detail
        if public_message is not None:
            self.public_message = public_message


class UpstreamRequestError(ProxyError):
    """Exception raised when a request to an upstream endpoint fails."""

    public_message = "failed to do request to deviantart"


class UpstreamDecodeError(ProxyError):
    """Exception raised when an upstream response cannot be decoded."""

    public_message = "failed to decode api response"


class ResolutionFailure(ProxyError):
    """Exception raised inside the video resolver; never surfaced to clients."""

    public_message = "failed to resolve video source"


class RenderError(ProxyError):
    """Exception raised when the embed template fails to compile or execute."""

    public_message = "failed to render embed"


__all__ = [
    "ProxyError",
    "RenderError",
    "ResolutionFailure",
    "UpstreamDecodeError",
    "UpstreamRequestError",
]
