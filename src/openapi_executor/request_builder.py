"""Assemble transport-ready HTTP requests from parsed operations."""

from __future__ import annotations

import base64
import logging
from typing import Any, Dict, Mapping, Optional, Tuple, Union
from urllib.parse import quote

from .errors import MissingParameterError
from .logging import redact_payload
from .models import (
    FORM_CONTENT_TYPE,
    JSON_CONTENT_TYPE,
    MULTIPART_CONTENT_TYPE,
    XML_CONTENT_TYPE,
    BodyData,
    Credentials,
    ParsedOperation,
    RequestDescription,
)


logger = logging.getLogger(__name__)

DEFAULT_API_KEY_HEADER = "X-API-Key"
DEFAULT_API_KEY_QUERY = "api_key"

# Characters encodeURIComponent leaves untouched besides alphanumerics and "-_.~".
_PATH_SAFE = "!*'()"

CredentialsInput = Union[Credentials, Mapping[str, Any], None]


class CredentialInjector:
    def __init__(self, credentials: CredentialsInput) -> None:
        if credentials is None or isinstance(credentials, Credentials):
            self.credentials = credentials
        else:
            self.credentials = Credentials.model_validate(dict(credentials))

    def build_auth(self) -> Tuple[Dict[str, str], Dict[str, str]]:
        headers: Dict[str, str] = {}
        query: Dict[str, str] = {}

        credentials = self.credentials
        if not credentials:
            return headers, query

        if credentials.auth_type == "apiKey":
            if credentials.api_key_location == "query":
                query[credentials.api_key_name or DEFAULT_API_KEY_QUERY] = credentials.api_key or ""
            else:
                headers[credentials.api_key_name or DEFAULT_API_KEY_HEADER] = (
                    credentials.api_key or ""
                )
        elif credentials.auth_type == "bearer":
            headers["Authorization"] = f"Bearer {credentials.bearer_token or ''}"
        elif credentials.auth_type == "basic":
            raw = f"{credentials.username or ''}:{credentials.password or ''}"
            encoded = base64.b64encode(raw.encode("utf-8")).decode("ascii")
            headers["Authorization"] = f"Basic {encoded}"

        return headers, query


def build_request(
    operation: ParsedOperation,
    base_url: str,
    params: Mapping[str, Any],
    body: Optional[BodyData] = None,
    credentials: CredentialsInput = None,
) -> RequestDescription:
    """
    Build the request description for one call of ``operation``.

    Args:
        operation: The operation to call
        base_url: Server URL the path template is appended to
        params: Parameter values keyed by parameter name
        body: Declared body content type and payload
        credentials: Authentication to inject, if any

    Returns:
        A RequestDescription ready for the transport

    Raises:
        MissingParameterError: a required path parameter has no value
    """
    body = body or BodyData()
    auth_headers, auth_query = CredentialInjector(credentials).build_auth()

    url = _build_url(base_url, operation, params)
    query = _build_query(operation, params)
    query.update(auth_query)
    headers = _build_headers(operation, params, body.content_type)
    headers.update(auth_headers)

    payload, json_flag = _build_body(body)

    request = RequestDescription(
        method=operation.method.upper(),
        url=url,
        headers=headers,
        query=query or None,
        body=payload,
        json=json_flag,
    )
    logger.debug(
        "Built request %s %s query=%s",
        request.method,
        request.url,
        redact_payload(request.query or {}),
    )
    return request


def _build_url(base_url: str, operation: ParsedOperation, params: Mapping[str, Any]) -> str:
    path = operation.path
    for param in operation.parameters_in("path"):
        value = params.get(param.name)
        if value is None:
            if param.required:
                raise MissingParameterError(param.name)
            continue
        path = path.replace(f"{{{param.name}}}", quote(_stringify(value), safe=_PATH_SAFE))
    return f"{base_url}{path}"


def _build_query(operation: ParsedOperation, params: Mapping[str, Any]) -> Dict[str, Any]:
    query: Dict[str, Any] = {}
    for param in operation.parameters_in("query"):
        value = params.get(param.name)
        if value is None or value == "":
            continue
        query[param.name] = value
    return query


def _build_headers(
    operation: ParsedOperation, params: Mapping[str, Any], content_type: Optional[str]
) -> Dict[str, str]:
    headers: Dict[str, str] = {"Accept": "application/json"}
    if content_type:
        headers["Content-Type"] = content_type

    for param in operation.parameters_in("header"):
        value = params.get(param.name)
        if value is None or value == "":
            continue
        headers[param.name] = _stringify(value)
    return headers


def _build_body(body: BodyData) -> Tuple[Optional[Union[Dict[str, Any], str]], Optional[bool]]:
    content_type = body.content_type
    data = body.data
    if not content_type:
        return None, None

    if content_type == JSON_CONTENT_TYPE:
        if isinstance(data, Mapping) and data:
            return dict(data), True
    elif content_type == XML_CONTENT_TYPE:
        if isinstance(data, str) and data:
            return data, None
    elif content_type == FORM_CONTENT_TYPE:
        if isinstance(data, Mapping) and data:
            return dict(data), None
    elif content_type == MULTIPART_CONTENT_TYPE:
        if isinstance(data, Mapping):
            return dict(data), (False if body.binary_property_name else None)
    return None, None


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
