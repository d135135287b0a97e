"""HTTP request methods understood by the dispatcher."""

from enum import Enum


class RequestMethod(str, Enum):
    """HTTP methods supported by :class:`netkit.NetworkManager`."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"


def request_method_to_string(method: RequestMethod) -> str:
    """Return the wire form of a request method.

    Plain strings are accepted and upper-cased so callers may pass
    ``"get"`` as well as ``RequestMethod.GET``.

    :param method: Request method enum member or method name
    :type method: RequestMethod
    :return: Upper-case HTTP method string
    :rtype: str
    """
    if isinstance(method, RequestMethod):
        return method.value
    return RequestMethod(str(method).upper()).value
