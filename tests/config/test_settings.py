"""Tests for loader settings."""

from typeloader import Complex, Loader, LoaderSettings, ModuleRegistry, String


def test_defaults():
    settings = LoaderSettings(_env_file=None)

    assert settings.default_base_type == "complex"
    assert settings.default_property_type == "value"
    assert settings.list_base_type == "list"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("TYPELOADER_DEFAULT_PROPERTY_TYPE", "string")

    assert LoaderSettings(_env_file=None).default_property_type == "string"


def test_explicit_values_win_over_environment(monkeypatch):
    monkeypatch.setenv("TYPELOADER_DEFAULT_BASE_TYPE", "string")

    assert LoaderSettings(_env_file=None, default_base_type="complex").default_base_type == "complex"


def test_loader_applies_property_default(settings):
    loader = Loader(modules=ModuleRegistry(), settings=settings.model_copy(update={"default_property_type": "string"}))

    Named = loader.resolve_type({"props": ["name"]})

    assert issubclass(Named, Complex)
    assert Named.type.props["name"].value_type is String.type
