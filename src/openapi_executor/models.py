"""Internal models for parsed operations and built requests."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field


HTTP_METHODS: Tuple[str, ...] = ("get", "post", "put", "patch", "delete")

JSON_CONTENT_TYPE = "application/json"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
MULTIPART_CONTENT_TYPE = "multipart/form-data"
XML_CONTENT_TYPE = "application/xml"

# Priority order: the first one present in a request body's content map wins.
SUPPORTED_CONTENT_TYPES: Tuple[str, ...] = (
    JSON_CONTENT_TYPE,
    FORM_CONTENT_TYPE,
    MULTIPART_CONTENT_TYPE,
    XML_CONTENT_TYPE,
)


@dataclass(frozen=True)
class ParsedParameter:
    name: str
    location: str
    required: bool = False
    schema: Dict[str, Any] = field(default_factory=lambda: {"type": "string"})
    description: str = ""


@dataclass(frozen=True)
class ParsedRequestBody:
    content_type: str
    schema: Dict[str, Any] = field(default_factory=dict)
    required: bool = False


@dataclass(frozen=True)
class ParsedOperation:
    operation_id: str
    method: str
    path: str
    summary: str = ""
    description: str = ""
    parameters: Tuple[ParsedParameter, ...] = ()
    request_body: Optional[ParsedRequestBody] = None

    def parameters_in(self, location: str) -> List[ParsedParameter]:
        return [param for param in self.parameters if param.location == location]


@dataclass(frozen=True)
class FieldOption:
    name: str
    value: Any


@dataclass(frozen=True)
class FieldDescriptor:
    name: str
    display_name: str
    type: str
    default: Any
    required: bool = False
    description: str = ""
    options: Tuple[FieldOption, ...] = ()
    operation_id: str = ""


@dataclass(frozen=True)
class RequestDescription:
    method: str
    url: str
    headers: Dict[str, str]
    query: Optional[Dict[str, Any]] = None
    body: Optional[Union[Dict[str, Any], str]] = None
    json: Optional[bool] = None

    def to_httpx_kwargs(self) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {
            "method": self.method,
            "url": self.url,
            "headers": dict(self.headers),
        }
        if self.query:
            kwargs["params"] = {key: _query_value(value) for key, value in self.query.items()}
        if self.body is None:
            return kwargs
        if self.json:
            kwargs["json"] = self.body
        elif isinstance(self.body, str):
            kwargs["content"] = self.body
        else:
            kwargs["data"] = {key: _query_value(value) for key, value in self.body.items()}
        return kwargs


def _query_value(value: Any) -> Any:
    if isinstance(value, bool):
        return "true" if value else "false"
    return value


class Credentials(BaseModel):
    """Authentication settings in the credential store's camelCase shape."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    auth_type: Literal["none", "apiKey", "bearer", "basic"] = Field(
        default="none", alias="authType"
    )
    api_key: Optional[str] = Field(default=None, alias="apiKey", repr=False)
    api_key_location: Literal["header", "query"] = Field(default="header", alias="apiKeyLocation")
    api_key_name: Optional[str] = Field(default=None, alias="apiKeyName")
    bearer_token: Optional[str] = Field(default=None, alias="bearerToken", repr=False)
    username: Optional[str] = Field(default=None)
    password: Optional[str] = Field(default=None, repr=False)
    spec_url: str = Field(default="", alias="specUrl")
    base_url_override: Optional[str] = Field(default=None, alias="baseUrlOverride")


class BodyData(BaseModel):
    content_type: Optional[str] = None
    data: Any = Field(default_factory=dict)
    binary_property_name: Optional[str] = None


class ExecutionItem(BaseModel):
    """User-supplied values for one execution of an operation."""

    path_parameters: Dict[str, Any] = Field(default_factory=dict)
    query_parameters: Dict[str, Any] = Field(default_factory=dict)
    header_parameters: Dict[str, Any] = Field(default_factory=dict)
    json_input_mode: Literal["fields", "raw"] = "fields"
    json_body: Dict[str, Any] = Field(default_factory=dict)
    raw_json: str = "{}"
    xml_body: str = ""
    form_data: Dict[str, Any] = Field(default_factory=dict)
    binary_property_name: str = "data"
    has_binary: bool = False

    def parameter_values(self) -> Dict[str, Any]:
        values: Dict[str, Any] = {}
        values.update(self.header_parameters)
        values.update(self.path_parameters)
        values.update(self.query_parameters)
        return values
