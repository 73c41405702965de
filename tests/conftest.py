import pytest

from stubs import StubService


@pytest.fixture
def stub_service() -> StubService:
    """A fresh prediction service stub per test."""
    return StubService()
