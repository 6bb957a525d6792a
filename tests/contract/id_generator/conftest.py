"""Fixtures for session ID generator contract tests."""

from collections.abc import Iterator

import pytest

from isotest.adapters.id_generators import SimpleIdGenerator, ULIDGenerator
from isotest.interfaces.id_generator import IdGenerator


@pytest.fixture(params=["ulid", "simple"])
def id_generator(request: pytest.FixtureRequest) -> Iterator[IdGenerator]:
    """Yield a fresh generator for each backend (`"ulid"`, `"simple"`)."""
    match request.param:
        case "ulid":
            yield ULIDGenerator()
        case "simple":
            yield SimpleIdGenerator()
        case _:
            raise ValueError(f"unknown id generator type: {request.param}")
