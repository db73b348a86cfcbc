from pathlib import Path

import pytest

from openapi_executor.loader import load_spec
from openapi_executor.operations import extract_operations

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture(scope="session")
def petstore_text() -> str:
    return (FIXTURES / "petstore.json").read_text(encoding="utf-8")


@pytest.fixture(scope="session")
def papyria_text() -> str:
    return (FIXTURES / "papyria.yaml").read_text(encoding="utf-8")


@pytest.fixture()
def petstore_spec(petstore_text):
    return load_spec(petstore_text)


@pytest.fixture()
def papyria_spec(papyria_text):
    return load_spec(papyria_text)


@pytest.fixture()
def petstore_operations(petstore_spec):
    return {op.operation_id: op for op in extract_operations(petstore_spec)}


@pytest.fixture()
def papyria_operations(papyria_spec):
    return {op.operation_id: op for op in extract_operations(papyria_spec)}
