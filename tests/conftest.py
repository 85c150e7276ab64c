import pytest

from propkit.core.builder import FieldBuilder


def _passthrough(value):
    return value


@pytest.fixture()
def builder():
    return FieldBuilder()


@pytest.fixture()
def bind(builder):
    """Apply an attachment to the shared builder and hand the builder back."""

    def _bind(attachment):
        attachment(builder)
        return builder

    return _bind


@pytest.fixture()
def passthrough():
    return _passthrough
