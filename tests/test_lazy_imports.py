"""Tests for positron.__init__ — lazy public API."""

import pytest

import positron


@pytest.mark.parametrize("name", positron.__all__)
def test_all_names_resolve(name: str) -> None:
    """Every name in __all__ must resolve via __getattr__ without error."""
    obj = getattr(positron, name)
    assert obj is not None, f"positron.{name} resolved to None"


def test_unknown_name_raises_attribute_error() -> None:
    with pytest.raises(AttributeError, match="no attribute"):
        positron.__getattr__("ThisDoesNotExist")
