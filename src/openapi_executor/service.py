"""Executor service tying spec loading, field listing and request execution together."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from .fields import parameters_to_fields, schema_to_fields, schema_to_form_fields
from .loader import load_spec
from .logging import redact_payload
from .models import (
    FORM_CONTENT_TYPE,
    JSON_CONTENT_TYPE,
    MULTIPART_CONTENT_TYPE,
    XML_CONTENT_TYPE,
    BodyData,
    Credentials,
    ExecutionItem,
    FieldDescriptor,
    ParsedOperation,
    ParsedRequestBody,
)
from .operations import extract_operations, find_operation, get_base_url
from .request_builder import build_request
from .transport import HttpTransport, fetch_spec

logger = logging.getLogger(__name__)

SpecFetcher = Callable[[str], Awaitable[str]]


@dataclass(frozen=True)
class FieldListing:
    fields: List[FieldDescriptor] = field(default_factory=list)
    empty_fields_notice: Optional[str] = None


class OpenApiExecutor:
    """
    Lists operations and fields for a spec and executes operations against it.

    Every call fetches and parses the OpenAPI document again; nothing is
    cached between calls, so upstream changes are picked up on the next call.
    """

    def __init__(
        self,
        credentials: Union[Credentials, Mapping[str, Any]],
        transport: Optional[HttpTransport] = None,
        spec_fetcher: Optional[SpecFetcher] = None,
    ) -> None:
        if isinstance(credentials, Credentials):
            self.credentials = credentials
        else:
            self.credentials = Credentials.model_validate(dict(credentials))
        self.transport = transport or HttpTransport()
        self.spec_fetcher = spec_fetcher or fetch_spec

    async def load(self) -> Tuple[Dict[str, Any], List[ParsedOperation]]:
        spec_text = await self.spec_fetcher(self.credentials.spec_url)
        spec = load_spec(spec_text)
        return spec, extract_operations(spec)

    async def list_operations(self) -> List[Dict[str, str]]:
        _, operations = await self.load()
        return [
            {
                "name": op.summary or op.operation_id,
                "value": op.operation_id,
                "description": f"{op.method.upper()} {op.path}",
            }
            for op in operations
        ]

    async def get_content_type(self, operation_id: str) -> List[Dict[str, str]]:
        operation = await self._selected_operation(operation_id)
        content_type = ""
        if operation and operation.request_body:
            content_type = operation.request_body.content_type
        return [{"name": content_type, "value": content_type}]

    async def get_path_parameters(self, operation_id: str) -> FieldListing:
        return await self._parameter_listing(operation_id, "path")

    async def get_query_parameters(self, operation_id: str) -> FieldListing:
        return await self._parameter_listing(operation_id, "query")

    async def get_json_body_fields(self, operation_id: str) -> FieldListing:
        operation = await self._selected_operation(operation_id)
        if not operation:
            return FieldListing(empty_fields_notice="Select an operation first")
        if not operation.request_body:
            return FieldListing(empty_fields_notice="This operation has no request body")
        if operation.request_body.content_type != JSON_CONTENT_TYPE:
            return FieldListing(empty_fields_notice="This operation does not use JSON body")
        return FieldListing(
            fields=schema_to_fields(operation.request_body.schema, operation.operation_id)
        )

    async def get_form_fields(self, operation_id: str) -> FieldListing:
        operation = await self._selected_operation(operation_id)
        if not operation:
            return FieldListing(empty_fields_notice="Select an operation first")
        if not operation.request_body:
            return FieldListing(empty_fields_notice="This operation has no request body")
        content_type = operation.request_body.content_type
        if content_type not in (FORM_CONTENT_TYPE, MULTIPART_CONTENT_TYPE):
            label = "JSON" if content_type == JSON_CONTENT_TYPE else "XML"
            return FieldListing(empty_fields_notice=f"Use {label} input for this operation")
        return FieldListing(
            fields=schema_to_form_fields(
                operation.request_body.schema, content_type, operation.operation_id
            )
        )

    async def execute(
        self,
        operation_id: str,
        items: Sequence[Union[ExecutionItem, Mapping[str, Any]]],
    ) -> List[Dict[str, Any]]:
        """
        Build and send one request per item, in order.

        A failing item raises immediately; results for earlier items are not
        returned in that case and whether to retry is left to the caller.
        """
        spec, operations = await self.load()
        operation = find_operation(operations, operation_id)
        base_url = get_base_url(spec, self.credentials.base_url_override)

        results: List[Dict[str, Any]] = []
        for index, raw_item in enumerate(items):
            item = (
                raw_item
                if isinstance(raw_item, ExecutionItem)
                else ExecutionItem.model_validate(dict(raw_item))
            )
            params = item.parameter_values()
            logger.info(
                "Executing operation=%s item=%s params=%s",
                operation.operation_id,
                index,
                redact_payload(params),
            )
            body = extract_body_data(operation.request_body, item)
            request = build_request(operation, base_url, params, body, self.credentials)
            results.append(await self.transport.send(request))

        return results

    async def _selected_operation(self, operation_id: str) -> Optional[ParsedOperation]:
        if not operation_id:
            return None
        _, operations = await self.load()
        for operation in operations:
            if operation.operation_id == operation_id:
                return operation
        return None

    async def _parameter_listing(self, operation_id: str, location: str) -> FieldListing:
        operation = await self._selected_operation(operation_id)
        if not operation:
            return FieldListing(empty_fields_notice="Select an operation first")
        parameters = operation.parameters_in(location)
        if not parameters:
            return FieldListing(
                empty_fields_notice=f"This operation has no {location} parameters"
            )
        return FieldListing(fields=parameters_to_fields(parameters))


def extract_body_data(
    request_body: Optional[ParsedRequestBody], item: ExecutionItem
) -> BodyData:
    if not request_body:
        return BodyData()

    content_type = request_body.content_type
    if content_type == JSON_CONTENT_TYPE:
        if item.json_input_mode == "fields":
            return BodyData(content_type=content_type, data=item.json_body)
        raw = item.raw_json
        data = json.loads(raw) if raw and raw.strip() else {}
        return BodyData(content_type=content_type, data=data)
    if content_type == XML_CONTENT_TYPE:
        return BodyData(content_type=content_type, data=item.xml_body)
    if content_type in (FORM_CONTENT_TYPE, MULTIPART_CONTENT_TYPE):
        if content_type == MULTIPART_CONTENT_TYPE and item.has_binary:
            return BodyData(
                content_type=content_type,
                data=item.form_data,
                binary_property_name=item.binary_property_name,
            )
        return BodyData(content_type=content_type, data=item.form_data)
    return BodyData()
