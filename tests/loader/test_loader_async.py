"""Tests for asynchronous resolution: dependency loading and ranked discovery."""

import asyncio

import pytest

from typeloader import (
    Complex,
    List,
    Loader,
    OperationInvalidError,
    String,
    TypeInfoRegistry,
)


class Alpha(Complex, type_spec={"id": "test/alpha"}):
    pass


class Beta(Complex, type_spec={"id": "test/beta"}):
    pass


class Gamma(Complex, type_spec={"id": "test/gamma"}):
    pass


def define_lazy(modules, module_id, value):
    async def load():
        await asyncio.sleep(0)
        return value

    modules.define(module_id, load)


@pytest.mark.asyncio
async def test_dependencies_loaded_once_then_built_once(loader, modules, monkeypatch):
    """CRITICAL: All unloaded dependencies are requested up front, then the type is built once.

    Why: Asynchronous resolution must not interleave loading with construction.
    """
    define_lazy(modules, "test/alpha", Alpha)
    define_lazy(modules, "test/beta", Beta)
    define_lazy(modules, "test/gamma", Gamma)

    requested = []
    require_async = modules.require_async

    async def spy_require(module_id):
        requested.append(module_id)
        return await require_async(module_id)

    created = []
    create = loader._create_type_by_object_spec

    def spy_create(spec, context):
        created.append(spec)
        return create(spec, context)

    monkeypatch.setattr(modules, "require_async", spy_require)
    monkeypatch.setattr(loader, "_create_type_by_object_spec", spy_create)

    Holder = await loader.resolve_type_async({
        "props": [
            {"name": "a", "value_type": "test/alpha"},
            {"name": "b", "value_type": "test/beta"},
            {"name": "c", "value_type": "test/gamma"},
            {"name": "d", "value_type": "number"},
        ]
    })

    assert sorted(requested) == ["test/alpha", "test/beta", "test/gamma"]
    assert len(created) == 1
    assert [p.value_type for p in Holder.type.props][:3] == [Alpha.type, Beta.type, Gamma.type]


@pytest.mark.asyncio
async def test_loaded_type_resolves_synchronously_afterwards(loader, modules):
    define_lazy(modules, "test/lazy", {"props": [{"name": "x", "value_type": "number"}]})

    Lazy = await loader.resolve_type_async("test/lazy")

    assert loader.resolve_type("test/lazy") is Lazy
    assert await loader.resolve_type_async("test/lazy") is Lazy


@pytest.mark.asyncio
async def test_nested_module_dependencies(loader, modules):
    define_lazy(modules, "test/outer", {"props": [{"name": "inner", "value_type": "test/inner"}]})
    define_lazy(modules, "test/inner", {"base": "test/root", "props": ["x"]})
    define_lazy(modules, "test/root", {"props": ["id"]})

    Outer = await loader.resolve_type_async("test/outer")
    inner = Outer.type.props["inner"].value_type

    assert inner.id == "test/inner"
    assert inner.ancestor.id == "test/root"
    assert inner.props.names == ["id", "x"]


@pytest.mark.asyncio
async def test_concurrent_resolution_yields_one_type(loader, modules):
    define_lazy(modules, "test/shared", {"props": ["a"]})

    first, second = await asyncio.gather(
        loader.resolve_type_async("test/shared"),
        loader.resolve_type_async({"props": [{"name": "s", "value_type": "test/shared"}]}),
    )

    assert second.type.props["s"].value_type is first.type


@pytest.mark.asyncio
async def test_async_load_failure_surfaces(loader, modules):
    def fail():
        raise RuntimeError("unavailable")

    modules.define("test/broken", fail)

    with pytest.raises(RuntimeError, match="unavailable"):
        await loader.resolve_type_async({"props": [{"name": "a", "value_type": "test/broken"}]})


@pytest.mark.asyncio
async def test_circular_modules_are_rejected(loader, modules):
    define_lazy(modules, "test/a", {"props": [{"name": "b", "value_type": "test/b"}]})
    define_lazy(modules, "test/b", {"props": [{"name": "a", "value_type": "test/a"}]})

    with pytest.raises(OperationInvalidError, match="depends on itself"):
        await loader.resolve_type_async("test/a")


@pytest.mark.asyncio
async def test_async_factory_receiving_loader(loader, modules):
    async def factory(ldr):
        assert ldr is loader
        return {"props": ["a"]}

    modules.define_value("test/made", factory)

    with pytest.raises(OperationInvalidError, match="asynchronous factory"):
        loader.resolve_type("test/made")

    Made = await loader.resolve_type_async("test/made")
    assert Made.type.id == "test/made"


@pytest.mark.asyncio
async def test_get_subtypes_of_async_loads_subtypes(modules, settings):
    types = TypeInfoRegistry()
    types.declare("test/base")
    types.declare("test/left", base="test/base")
    types.declare("test/right", base="test/base")
    define_lazy(modules, "test/base", {"is_abstract": True})
    define_lazy(modules, "test/left", {"base": "test/base"})
    define_lazy(modules, "test/right", {"base": "test/base", "is_browsable": False})
    loader = Loader(modules=modules, type_info=types, settings=settings)

    subtypes = await loader.get_subtypes_of_async("test/base")
    browsable = await loader.get_subtypes_of_async("test/base", is_browsable=True)

    assert [cls.type.id for cls in subtypes] == ["test/left", "test/right"]
    assert [cls.type.id for cls in browsable] == ["test/left"]


# Instances


@pytest.fixture
def ranked(modules, settings):
    def fail():
        raise RuntimeError("unavailable")

    modules.define("test/broken", fail)
    define_lazy(modules, "test/fine", "fine")
    define_lazy(modules, "test/other", "other")
    return Loader(
        {
            "test/broken": {"typeId": "string", "ranking": 10},
            "test/fine": {"typeId": "string", "ranking": 5},
            "test/other": {"typeId": "string", "ranking": 1},
        },
        modules=modules,
        settings=settings,
    )


@pytest.mark.asyncio
async def test_ranked_search_skips_failed_candidates(ranked):
    """CRITICAL: A candidate that fails to load does not hide the next best one.

    Why: Optional extensions must not break discovery of the others.
    """
    best = await ranked.get_instance_of_type_async("string")

    assert best.value == "fine"


@pytest.mark.asyncio
async def test_all_instances_skip_failed_candidates(ranked):
    instances = await ranked.get_instances_of_type_async("string")

    assert [i.value for i in instances] == ["fine", "other"]


@pytest.mark.asyncio
async def test_sync_search_after_async_load(ranked):
    await ranked.get_instances_of_type_async("string")

    assert ranked.resolve_instance({"$instance": {"id": "test/other"}}).value == "other"


@pytest.mark.asyncio
async def test_required_search_without_result(ranked):
    with pytest.raises(OperationInvalidError, match="no defined matching instance") as info:
        await ranked.get_instance_of_type_async("string", filter=lambda i: i.value == "none", is_required=True)

    assert isinstance(info.value.__cause__, RuntimeError)
    assert await ranked.get_instance_of_type_async("number") is None


@pytest.mark.asyncio
async def test_special_forms_async(ranked):
    by_id = await ranked.resolve_instance_async({"$instance": {"id": "test/other"}})
    by_type = await ranked.resolve_instance_async({"$instance": {"type": "string"}})
    listed = await ranked.resolve_instance_async({"$instance": {"type": ["string"]}})

    assert by_id.value == "other"
    assert by_type.value == "fine"
    assert isinstance(listed, List)
    assert listed.type.of is String.type
    assert [i.value for i in listed] == ["fine", "other"]


@pytest.mark.asyncio
async def test_inline_typed_instance_loads_its_type(loader, modules):
    define_lazy(modules, "test/point", {"props": [{"name": "x", "value_type": "number"}]})

    point = await loader.resolve_instance_async({"_": "test/point", "x": 3})

    assert point.type.id == "test/point"
    assert point.get("x").value == 3


@pytest.mark.asyncio
async def test_instance_by_id_loads_nested_references(modules, settings):
    define_lazy(modules, "test/holder", {"props": [{"name": "item", "value_type": "value"}]})
    define_lazy(modules, "test/item", "inner")
    define_lazy(modules, "test/box", {"item": {"$instance": {"id": "test/item"}}})
    loader = Loader(
        {"test/item": {"type_id": "string"}, "test/box": {"type_id": "test/holder"}},
        modules=modules,
        settings=settings,
    )

    box = await loader.resolve_instance_async({"$instance": {"id": "test/box"}})

    assert box.get("item").value == "inner"
    assert box.get("item") is loader.resolve_instance({"$instance": {"id": "test/item"}})


@pytest.mark.asyncio
async def test_permanent_id_in_spec_loads_defined_module(loader, modules):
    define_lazy(modules, "test/shape", {"props": ["size"]})

    Shape = await loader.resolve_type_async({"id": "test/shape", "props": ["other"]})

    assert Shape is loader.resolve_type("test/shape")
    assert Shape.type.props.names == ["size"]


@pytest.mark.asyncio
async def test_permanent_id_in_spec_without_module_defines_type(loader):
    Defined = await loader.resolve_type_async({"id": "test/defined", "props": ["a"]})

    assert loader.resolve_type("test/defined") is Defined
    assert Defined.type.props.names == ["a"]
