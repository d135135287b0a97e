"""Normalization of server error bodies into :class:`ApiException`.

Error bodies arrive in loosely typed shapes: nothing at all, a plain
string, or a JSON object whose message field may be a string or a list
of strings. The body is first classified into one of three variants
and only then inspected, so field access never happens on a value of
the wrong kind.

The normalizer never raises. Whatever it is given, it returns an
exception object for the caller to raise.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from numbers import Number
from typing import Any, List, Optional, Union

from .exceptions import ApiException
from .models import NetworkErrorParams

logger = logging.getLogger(__name__)

DEFAULT_STATUS_CODE = 400
UNPARSEABLE_STATUS_CODE = 417


@dataclass(frozen=True)
class AbsentBody:
    """The failed response carried no body."""


@dataclass(frozen=True)
class TextBody:
    """The failed response body is a plain string."""

    text: str


@dataclass(frozen=True)
class StructuredBody:
    """The failed response body is a JSON object."""

    fields: Mapping = field(default_factory=dict)


ErrorBody = Union[AbsentBody, TextBody, StructuredBody]


def classify_body(raw: Any) -> Optional[ErrorBody]:
    """Discriminate a decoded error body into one of the body variants.

    :param raw: Decoded response body
    :type raw: Any
    :return: The matching variant, or None for unsupported shapes
        such as lists and numbers
    :rtype: Optional[ErrorBody]
    """
    if raw is None:
        return AbsentBody()
    if isinstance(raw, (AbsentBody, TextBody, StructuredBody)):
        return raw
    if isinstance(raw, str):
        return TextBody(raw)
    if isinstance(raw, Mapping):
        return StructuredBody(raw)
    return None


def _is_number(value: Any) -> bool:
    return isinstance(value, Number) and not isinstance(value, bool)


def _from_structured(
    body: StructuredBody, params: NetworkErrorParams, status_code: Optional[int]
) -> ApiException:
    message_value = body.fields.get(params.message_key)
    single_message: Optional[str] = None
    messages: List[str] = []

    if isinstance(message_value, str):
        single_message = message_value
    elif isinstance(message_value, (list, tuple)):
        messages = [str(m) for m in message_value]
        single_message = messages[0] if messages else None

    code_value = body.fields.get(params.status_code_key)
    if _is_number(code_value):
        code = int(code_value)
    else:
        code = status_code if status_code is not None else DEFAULT_STATUS_CODE

    return ApiException(
        code,
        single_message or params.could_not_parse_error,
        messages,
    )


def normalize_error(
    body: Any,
    params: NetworkErrorParams,
    status_code: Optional[int] = None,
) -> ApiException:
    """Convert a decoded error body and status hint into an ApiException.

    :param body: Decoded response body, or an already classified variant
    :type body: Any
    :param params: Error vocabulary (keys and fallback strings)
    :type params: NetworkErrorParams
    :param status_code: HTTP status of the failed response, if known
    :type status_code: Optional[int]
    :return: The normalized exception
    :rtype: ApiException
    """
    try:
        variant = classify_body(body)

        if isinstance(variant, AbsentBody):
            return ApiException(
                status_code if status_code is not None else DEFAULT_STATUS_CODE,
                params.json_null_error,
            )

        if isinstance(variant, TextBody):
            return ApiException(
                status_code if status_code is not None else DEFAULT_STATUS_CODE,
                variant.text if len(variant.text) > 0 else params.json_is_empty_error,
            )

        if isinstance(variant, StructuredBody) and len(variant.fields) > 0:
            return _from_structured(variant, params, status_code)

        return ApiException(
            status_code if status_code is not None else UNPARSEABLE_STATUS_CODE,
            params.could_not_parse_error,
        )
    except Exception as e:
        logger.debug(f"Error body could not be normalized: {e}")
        return ApiException(
            status_code if status_code is not None else DEFAULT_STATUS_CODE,
            params.could_not_parse_error,
        )
