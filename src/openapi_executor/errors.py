"""Exceptions raised by the OpenAPI executor."""

from __future__ import annotations

from typing import List, Optional


class OpenApiExecutorError(Exception):
    pass


class InvalidSpecError(OpenApiExecutorError):
    def __init__(self, message: str, errors: Optional[List[str]] = None) -> None:
        super().__init__(message)
        self.errors = list(errors or [])


class CyclicReferenceError(InvalidSpecError):
    def __init__(self, chain: List[str]) -> None:
        super().__init__(f"Cyclic $ref detected: {' -> '.join(chain)}", errors=list(chain))
        self.chain = list(chain)


class OperationNotFoundError(OpenApiExecutorError):
    def __init__(self, operation_id: str) -> None:
        super().__init__(f'Operation "{operation_id}" not found in OpenAPI spec')
        self.operation_id = operation_id


class MissingParameterError(OpenApiExecutorError):
    def __init__(self, name: str) -> None:
        super().__init__(f'Missing value for required path parameter "{name}"')
        self.name = name


class SpecFetchError(OpenApiExecutorError):
    pass


class ExecutionError(OpenApiExecutorError):
    pass
