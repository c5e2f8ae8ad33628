"""
Exceptions.
"""

import httpx

from ..models import meta_v1


class ConfigurationError(Exception):
    """
    Configuration specific errors: invalid kubeconfig or missing entity declaration.
    """

    pass


class DeserializationError(Exception):
    """
    The server response can't be decoded into the expected shape.
    """


class LoadResourceError(Exception):
    """
    Error in loading a resource
    """


class TransportError(Exception):
    """
    Network or HTTP failure while talking to the API server.
    """


class StreamError(TransportError):
    """
    The connection of a watch stream failed.
    """


def _status_from_response(response: httpx.Response) -> "meta_v1.Status":
    try:
        data = response.json()
    except ValueError:
        data = None
    if isinstance(data, dict) and data.get("kind", "Status") == "Status":
        return meta_v1.Status.from_dict(data, lazy=False)
    return meta_v1.Status(
        status="Failure",
        code=response.status_code,
        message=response.text or response.reason_phrase,
    )


class ApiError(TransportError):
    """
    The API server replied with an error status. The decoded `Status` object is available as `status`.
    """
    status: "meta_v1.Status"

    def __init__(
        self, request: httpx.Request = None, response: httpx.Response = None
    ) -> None:
        self.request = request
        self.response = response
        self.status = _status_from_response(response)
        super().__init__(self.status.message)

    @property
    def status_code(self) -> int:
        return self.response.status_code


class NotFoundError(ApiError):
    """
    The object doesn't exist (HTTP 404).
    """


class ConflictError(ApiError):
    """
    The request conflicts with the current state of the object (HTTP 409), usually
    because the provided `resourceVersion` is out of date.
    """


STATUS_ERRORS = {
    404: NotFoundError,
    409: ConflictError,
}


def api_error(request: httpx.Request, response: httpx.Response) -> ApiError:
    cls = STATUS_ERRORS.get(response.status_code, ApiError)
    return cls(request=request, response=response)
