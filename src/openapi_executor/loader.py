"""OpenAPI spec loader: parse, validate and dereference spec text."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List

import yaml
from openapi_spec_validator import OpenAPIV30SpecValidator, OpenAPIV31SpecValidator

from .errors import InvalidSpecError
from .refs import dereference


logger = logging.getLogger(__name__)


def load_spec(spec_text: str) -> Dict[str, Any]:
    """Parse, validate and fully dereference OpenAPI 3.0/3.1 spec text."""
    spec = parse_spec_text(spec_text)
    validate_spec(spec)
    document = dereference(spec)
    logger.debug(
        "Loaded OpenAPI spec %r (%s paths)",
        (document.get("info") or {}).get("title"),
        len(document.get("paths") or {}),
    )
    return document


def parse_spec_text(spec_text: str) -> Dict[str, Any]:
    """Parse JSON or YAML spec text into a mapping."""
    try:
        data = json.loads(spec_text)
    except ValueError:
        try:
            data = yaml.safe_load(spec_text)
        except yaml.YAMLError as exc:
            raise InvalidSpecError(f"Invalid OpenAPI spec: {exc}", errors=[str(exc)]) from exc
        data = _stringify_keys(data)

    if not isinstance(data, dict):
        raise InvalidSpecError(
            "Invalid OpenAPI spec: document root must be an object",
            errors=["document root must be an object"],
        )
    return data


def validate_spec(spec: Dict[str, Any]) -> None:
    """Validate against the OpenAPI grammar, reporting every error at once."""
    version = str(spec.get("openapi") or "")
    if version.startswith("3.0"):
        validator_cls = OpenAPIV30SpecValidator
    elif version.startswith("3.1"):
        validator_cls = OpenAPIV31SpecValidator
    else:
        message = f"unsupported or missing openapi version: {version or '<none>'}"
        raise InvalidSpecError(f"Invalid OpenAPI spec: {message}", errors=[message])

    try:
        errors: List[str] = [error.message for error in validator_cls(spec).iter_errors()]
    except Exception as exc:
        raise InvalidSpecError(f"Invalid OpenAPI spec: {exc}", errors=[str(exc)]) from exc

    if errors:
        raise InvalidSpecError(f"Invalid OpenAPI spec: {', '.join(errors)}", errors=errors)


def _stringify_keys(node: Any) -> Any:
    # YAML reads unquoted keys such as response codes as ints; JSON keys are always strings.
    if isinstance(node, dict):
        return {str(key): _stringify_keys(value) for key, value in node.items()}
    if isinstance(node, list):
        return [_stringify_keys(item) for item in node]
    return node
