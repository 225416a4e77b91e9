import pytest

from helpers import FAST, FakeBackend
from pairchat.config import ChatConfig


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def fast_config() -> ChatConfig:
    return FAST
