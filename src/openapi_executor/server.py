"""MCP server exposing every OpenAPI operation as a tool."""

import functools
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set, Tuple

from fastmcp import FastMCP
from pydantic import BaseModel, ConfigDict, Field, create_model

from .config import Settings
from .errors import OpenApiExecutorError
from .models import JSON_CONTENT_TYPE, XML_CONTENT_TYPE, ExecutionItem, ParsedOperation
from .service import OpenApiExecutor
from .transport import HttpTransport, fetch_spec

logger = logging.getLogger(__name__)

_BODY_FIELD = "body"
_LOCATION_FIELDS = {
    "path": "path_parameters",
    "query": "query_parameters",
    "header": "header_parameters",
}


async def build_server(settings: Settings) -> Tuple[FastMCP, Optional[object]]:
    executor = build_executor(settings)

    mcp = FastMCP(settings.service_name, instructions=_instructions())
    app = _get_http_app(mcp, settings)
    _attach_auth(app, settings)
    _attach_healthcheck(app)

    _, operations = await executor.load()
    allowlist = settings.operation_ids()
    for operation in operations:
        if allowlist and operation.operation_id not in allowlist:
            continue
        tool_name = format_tool_name(operation.operation_id)
        handler = _tool_handler(executor, operation, build_input_model(operation))
        mcp.tool(name=tool_name, description=_tool_description(operation))(handler)
        logger.info("Registered tool: %s (%s %s)", tool_name, operation.method.upper(), operation.path)

    return mcp, app


def build_executor(settings: Settings) -> OpenApiExecutor:
    return OpenApiExecutor(
        settings.credentials(),
        transport=HttpTransport(
            timeout=settings.http_timeout_seconds, verify=settings.verify_ssl
        ),
        spec_fetcher=functools.partial(
            fetch_spec, timeout=settings.http_timeout_seconds, verify=settings.verify_ssl
        ),
    )


def build_input_model(operation: ParsedOperation) -> type[BaseModel]:
    fields: Dict[str, Tuple[Any, Any]] = {}
    field_names: Dict[str, str] = {}

    for parameter in operation.parameters:
        if parameter.location not in _LOCATION_FIELDS:
            continue
        field_type = _schema_to_type(parameter.schema)
        default = Field(
            ... if parameter.required else None,
            alias=parameter.name,
            description=parameter.description or None,
        )
        # Operation-level parameters come last and replace path-level ones of the same name.
        field_name = field_names.get(parameter.name) or _field_name(
            parameter.name, set(fields)
        )
        field_names[parameter.name] = field_name
        fields[field_name] = (
            field_type if parameter.required else Optional[field_type],
            default,
        )

    request_body = operation.request_body
    if request_body:
        body_type: Any = str if request_body.content_type == XML_CONTENT_TYPE else Dict[str, Any]
        fields[_field_name(_BODY_FIELD, set(fields))] = (
            body_type if request_body.required else Optional[body_type],
            Field(
                ... if request_body.required else None,
                alias=_body_alias(operation),
                description="Request body",
            ),
        )

    model_config = ConfigDict(populate_by_name=True)
    model_name = f"{_sanitize_name(operation.operation_id)}Input"
    return create_model(model_name, __config__=model_config, **fields)


def payload_to_item(operation: ParsedOperation, payload: Dict[str, Any]) -> ExecutionItem:
    """Split a tool payload keyed by parameter name into an execution item."""
    values: Dict[str, Dict[str, Any]] = {name: {} for name in _LOCATION_FIELDS.values()}
    for parameter in operation.parameters:
        target = _LOCATION_FIELDS.get(parameter.location)
        if target and payload.get(parameter.name) is not None:
            values[target][parameter.name] = payload[parameter.name]

    item: Dict[str, Any] = dict(values)
    body = payload.get(_body_alias(operation))
    request_body = operation.request_body
    if request_body and body is not None:
        if request_body.content_type == XML_CONTENT_TYPE:
            item["xml_body"] = body
        elif request_body.content_type == JSON_CONTENT_TYPE:
            item["json_body"] = body
        else:
            item["form_data"] = body
    return ExecutionItem.model_validate(item)


def format_tool_name(operation_id: str) -> str:
    return f"op_{_sanitize_name(operation_id).lower()}"


def _tool_handler(
    executor: OpenApiExecutor, operation: ParsedOperation, input_model: type[BaseModel]
) -> Callable[[Any], Awaitable[Dict[str, Any]]]:
    async def handler(payload: input_model) -> Dict[str, Any]:
        item = payload_to_item(operation, payload.model_dump(by_alias=True, exclude_none=True))
        try:
            results = await executor.execute(operation.operation_id, [item])
        except OpenApiExecutorError as exc:
            logger.error("Operation %s failed: %s", operation.operation_id, exc)
            return _format_error(str(exc))
        return _format_result(results[0])

    handler.__name__ = format_tool_name(operation.operation_id)
    return handler


def _format_result(result: Any) -> Dict[str, Any]:
    return {"content": [{"type": "json", "json": result}]}


def _format_error(message: str) -> Dict[str, Any]:
    return {"content": [{"type": "text", "text": message}], "is_error": True}


def _tool_description(operation: ParsedOperation) -> str:
    summary = operation.summary or operation.description or operation.operation_id
    return f"{operation.method.upper()} {operation.path}: {summary}"


def _schema_to_type(schema: Dict[str, Any]) -> Any:
    schema_type = schema.get("type")
    if isinstance(schema_type, list):
        schema_type = schema_type[0] if schema_type else None
    if schema_type == "integer":
        return int
    if schema_type == "number":
        return float
    if schema_type == "boolean":
        return bool
    if schema_type == "array":
        return List[Any]
    if schema_type == "object":
        return Dict[str, Any]
    return str


def _sanitize_name(name: str) -> str:
    return "".join(ch if ch.isalnum() else "_" for ch in name)


def _field_name(name: str, taken: Set[str]) -> str:
    base = _sanitize_name(name).lstrip("_")
    if not base or base[0].isdigit() or hasattr(BaseModel, base):
        base = f"param_{base}"
    return _unique_name(base, taken)


def _body_alias(operation: ParsedOperation) -> str:
    return _unique_name(_BODY_FIELD, {parameter.name for parameter in operation.parameters})


def _unique_name(name: str, taken: Set[str]) -> str:
    candidate = name
    index = 2
    while candidate in taken:
        candidate = f"{name}_{index}"
        index += 1
    return candidate


def _attach_auth(app, settings: Settings) -> None:  # type: ignore[no-untyped-def]
    if not app:
        return
    if not settings.auth_token:
        logger.warning("No auth token configured; HTTP endpoints are unauthenticated")
        return

    @app.middleware("http")
    async def auth_middleware(request, call_next):  # type: ignore[no-untyped-def]
        if request.method == "OPTIONS":
            return await call_next(request)
        if request.url.path.endswith("/health"):
            return await call_next(request)

        auth_header = request.headers.get("authorization", "")
        token = auth_header.replace("Bearer", "").strip()
        if token == settings.auth_token:
            return await call_next(request)

        from starlette.responses import JSONResponse

        return JSONResponse({"error": "Unauthorized"}, status_code=401)


def _attach_healthcheck(app) -> None:  # type: ignore[no-untyped-def]
    if not app:
        return

    async def healthcheck(_request):  # type: ignore[no-untyped-def]
        from starlette.responses import JSONResponse

        return JSONResponse({"status": "ok"})

    app.add_route("/health", healthcheck, methods=["GET"])


def _instructions() -> str:
    return (
        "OpenAPI executor. "
        "Each tool calls one operation of the configured OpenAPI spec and returns the JSON response."
    )


def _get_http_app(mcp: FastMCP, settings: Settings):  # type: ignore[no-untyped-def]
    transport = settings.transport.lower()
    if transport in {"http"}:
        return mcp.http_app(transport="http", stateless_http=True, json_response=True)
    if transport in {"streamable-http", "streamablehttp"}:
        return mcp.http_app(
            transport="streamable-http", stateless_http=True, json_response=True
        )
    return None
