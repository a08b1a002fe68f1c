"""Shared test fixtures."""

import sys

import pytest

# Ensure src is in path
sys.path.insert(0, "src")

from typeloader import (
    Complex,
    Loader,
    LoaderSettings,
    ModuleRegistry,
)


@pytest.fixture
def settings():
    """Settings with the built-in defaults, ignoring the environment."""
    return LoaderSettings(
        default_base_type="complex",
        default_property_type="value",
        list_base_type="list",
    )


@pytest.fixture
def modules():
    """Fresh in-memory module registry."""
    return ModuleRegistry()


@pytest.fixture
def loader(modules, settings):
    """Fresh Loader over the module registry."""
    return Loader(modules=modules, settings=settings)


class FixturePoint(Complex, type_spec={"id": "test/point", "props": [
    {"name": "x", "value_type": "number"},
    {"name": "y", "value_type": "number"},
]}):
    pass


@pytest.fixture
def point_cls(loader):
    """Identified complex type, registered with the test loader."""
    return loader.register_type(FixturePoint)
