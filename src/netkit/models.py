"""Value models shared by the dispatcher, the coordinator and the normalizer.

The models are immutable pydantic models: a request description is
fixed once it is handed to the dispatcher, and the error vocabulary is
read-only after construction.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from .enums import RequestMethod


class NetworkErrorParams(BaseModel):
    """Error vocabulary used to interpret server error bodies.

    Names the keys that hold the message and the status code in a
    structured error body, and the fallback strings used when the
    body is missing, empty or cannot be interpreted.
    """

    model_config = ConfigDict(frozen=True)

    message_key: str = Field("message", description="Key holding the error message")
    status_code_key: str = Field("status", description="Key holding the status code")
    no_internet_error: str = Field(
        "No internet connection",
        description="Message used when no response reached the client",
    )
    could_not_parse_error: str = Field(
        "Could not parse the error",
        description="Fallback for bodies that cannot be interpreted",
    )
    json_null_error: str = Field(
        "Empty error message", description="Fallback for a missing body"
    )
    json_is_empty_error: str = Field(
        "Empty error message", description="Fallback for an empty string body"
    )


class RequestOptions(BaseModel):
    """Per-call options merged over the static request options."""

    model_config = ConfigDict(frozen=True)

    headers: Dict[str, str] = Field(default_factory=dict)
    params: Optional[Dict[str, Any]] = None
    timeout: Optional[float] = Field(
        None, description="Per-call timeout in seconds, overrides the client default"
    )


class LogicalRequest(BaseModel):
    """Transport-independent description of one API call."""

    model_config = ConfigDict(frozen=True)

    url: str
    method: RequestMethod = RequestMethod.GET
    data: Any = None
    config: RequestOptions = Field(default_factory=RequestOptions)
    is_token_refresh_required: bool = False
