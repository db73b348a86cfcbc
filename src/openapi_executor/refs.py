"""Local $ref resolution for OpenAPI documents."""

from __future__ import annotations

import copy
from typing import Any, Dict, List

from .errors import CyclicReferenceError, InvalidSpecError


def get_ref_from_spec(full_spec: Dict[str, Any], ref: str) -> Any:
    """Given the spec as a dict, get the node the provided $ref points to."""
    if not ref.startswith("#"):
        raise InvalidSpecError(f"Unsupported external $ref: {ref}", errors=[ref])

    cur: Any = full_spec
    for tier in ref[1:].split("/")[1:]:
        token = tier.replace("~1", "/").replace("~0", "~")
        if isinstance(cur, dict) and token in cur:
            cur = cur[token]
        elif isinstance(cur, list) and token.isdigit() and int(token) < len(cur):
            cur = cur[int(token)]
        else:
            raise InvalidSpecError(f"Unresolvable $ref: {ref}", errors=[ref])
    return cur


def dereference(spec: Dict[str, Any]) -> Dict[str, Any]:
    """
    Return a copy of ``spec`` with every local ``$ref`` replaced by its target.

    Each use site receives its own deep copy of the resolved subtree. Keys
    sitting next to a ``$ref`` are overlaid on the resolved target.

    Raises:
        CyclicReferenceError: a reference (transitively) points back to itself
        InvalidSpecError: a reference is external or cannot be resolved
    """
    resolved: Dict[str, Any] = {}
    return _resolve(spec, spec, [], resolved)


def _resolve(node: Any, root: Dict[str, Any], stack: List[str], resolved: Dict[str, Any]) -> Any:
    if isinstance(node, list):
        return [_resolve(item, root, stack, resolved) for item in node]
    if not isinstance(node, dict):
        return node

    ref = node.get("$ref")
    if isinstance(ref, str):
        target = _resolve_ref(ref, root, stack, resolved)
        siblings = {key: value for key, value in node.items() if key != "$ref"}
        if not siblings:
            return target
        if not isinstance(target, dict):
            return target
        merged = dict(target)
        merged.update(_resolve(siblings, root, stack, resolved))
        return merged

    return {key: _resolve(value, root, stack, resolved) for key, value in node.items()}


def _resolve_ref(ref: str, root: Dict[str, Any], stack: List[str], resolved: Dict[str, Any]) -> Any:
    if ref in stack:
        raise CyclicReferenceError(stack[stack.index(ref):] + [ref])
    if ref not in resolved:
        target = get_ref_from_spec(root, ref)
        stack.append(ref)
        try:
            resolved[ref] = _resolve(target, root, stack, resolved)
        finally:
            stack.pop()
    return copy.deepcopy(resolved[ref])
