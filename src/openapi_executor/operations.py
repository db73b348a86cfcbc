"""Operation extraction from a dereferenced OpenAPI document."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence

from .errors import OperationNotFoundError
from .models import (
    HTTP_METHODS,
    SUPPORTED_CONTENT_TYPES,
    ParsedOperation,
    ParsedParameter,
    ParsedRequestBody,
)


logger = logging.getLogger(__name__)


def extract_operations(spec: Dict[str, Any]) -> List[ParsedOperation]:
    """Flatten the path/method matrix: paths in document order, methods in fixed order."""
    operations: List[ParsedOperation] = []
    paths = spec.get("paths") or {}

    for path, path_item in paths.items():
        if not isinstance(path_item, dict):
            continue
        shared_parameters = path_item.get("parameters") or []
        for method in HTTP_METHODS:
            operation = path_item.get(method)
            if not isinstance(operation, dict):
                continue
            operations.append(_parse_operation(path, method, operation, shared_parameters))

    logger.debug("Extracted %s operations", len(operations))
    return operations


def find_operation(operations: Iterable[ParsedOperation], operation_id: str) -> ParsedOperation:
    for operation in operations:
        if operation.operation_id == operation_id:
            return operation
    raise OperationNotFoundError(operation_id)


def get_base_url(spec: Dict[str, Any], override: Optional[str] = None) -> str:
    if override:
        return override
    servers = spec.get("servers") or []
    if not servers:
        return ""
    server = servers[0]
    if isinstance(server, dict):
        return server.get("url") or ""
    return ""


def _parse_operation(
    path: str,
    method: str,
    operation: Dict[str, Any],
    shared_parameters: Sequence[Any],
) -> ParsedOperation:
    merged = [*shared_parameters, *(operation.get("parameters") or [])]
    parameters = tuple(
        _parse_parameter(parameter) for parameter in merged if _is_parameter_object(parameter)
    )

    return ParsedOperation(
        operation_id=operation.get("operationId") or _fallback_operation_id(method, path),
        method=method,
        path=path,
        summary=operation.get("summary") or "",
        description=operation.get("description") or "",
        parameters=parameters,
        request_body=_extract_request_body(operation.get("requestBody")),
    )


def _is_parameter_object(parameter: Any) -> bool:
    return isinstance(parameter, dict) and "$ref" not in parameter and bool(parameter.get("name"))


def _parse_parameter(parameter: Dict[str, Any]) -> ParsedParameter:
    return ParsedParameter(
        name=parameter["name"],
        location=parameter.get("in") or "query",
        required=bool(parameter.get("required", False)),
        schema=parameter.get("schema") or {"type": "string"},
        description=parameter.get("description") or "",
    )


def _extract_request_body(request_body: Any) -> Optional[ParsedRequestBody]:
    if not isinstance(request_body, dict) or "$ref" in request_body:
        return None

    content = request_body.get("content") or {}
    for content_type in SUPPORTED_CONTENT_TYPES:
        media = content.get(content_type)
        if media is None:
            continue
        schema = media.get("schema") if isinstance(media, dict) else None
        return ParsedRequestBody(
            content_type=content_type,
            schema=schema or {},
            required=bool(request_body.get("required", False)),
        )
    return None


def _fallback_operation_id(method: str, path: str) -> str:
    return f"{method}_{path.replace('/', '_')}"
