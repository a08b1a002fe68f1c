"""Dependency discovery for asynchronous resolution.

Before building a type or an instance asynchronously, the loader walks its
reference and collects every module id it mentions that is not known yet.
All of them are requested at once; construction then runs synchronously.

Temporary ids are never dependencies. Ids for which `is_known` returns True
(standard types, already loaded types) are skipped.
The permanent id of an inline specification is a dependency too: the loader
skips ids that no module defines.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from typing import Any

from typeloader.core.specification import is_id_temporary

type IsKnown = Callable[[str], bool]


def iter_type_dependencies(ref: Any, is_known: IsKnown) -> Iterator[str]:
    """Yield the unknown module ids a type reference depends on.

    Args:
        ref: Type reference: id, list shorthand, generic specification, or
            an already built class or type (no dependencies).
        is_known: Predicate telling if an id needs no loading.

    Yields:
        Module ids, possibly repeated.
    """
    if isinstance(ref, str):
        if not is_id_temporary(ref) and not is_known(ref):
            yield ref
    elif isinstance(ref, list):
        for item in ref:
            yield from iter_type_dependencies(item, is_known)
    elif isinstance(ref, Mapping):
        yield from _iter_spec_dependencies(ref, is_known)


def _iter_spec_dependencies(spec: Mapping[str, Any], is_known: IsKnown) -> Iterator[str]:
    type_id = spec.get("id")
    if isinstance(type_id, str) and type_id and not is_id_temporary(type_id):
        if is_known(type_id):
            # Already loaded: the rest of the specification is not used.
            return
        # A module defining the id replaces the specification.
        yield type_id

    yield from iter_type_dependencies(spec.get("base"), is_known)
    yield from iter_type_dependencies(spec.get("of"), is_known)

    mixins = spec.get("mixins")
    if isinstance(mixins, (str, list)):
        yield from iter_type_dependencies(mixins, is_known)

    props = spec.get("props")
    if isinstance(props, Mapping):
        props = list(props.values())
    for prop in props or ():
        if isinstance(prop, Mapping):
            yield from iter_type_dependencies(prop.get("value_type"), is_known)
            yield from iter_instance_dependencies(prop.get("default_value"), is_known)


def iter_instance_dependencies(ref: Any, is_known: IsKnown) -> Iterator[str]:
    """Yield the unknown module ids an instance reference depends on.

    Covers `$instance` references by id, the types of `$instance` searches,
    and the types of inline-typed (`{"_": type, ...}`) specifications at any depth.
    """
    if isinstance(ref, list):
        for item in ref:
            yield from iter_instance_dependencies(item, is_known)
    elif isinstance(ref, Mapping):
        special = ref.get("$instance")
        if isinstance(special, Mapping):
            instance_id = special.get("id")
            if isinstance(instance_id, str):
                if not is_known(instance_id):
                    yield instance_id
            else:
                yield from iter_type_dependencies(special.get("type"), is_known)
            return

        if "_" in ref:
            yield from iter_type_dependencies(ref["_"], is_known)
        for key, value in ref.items():
            if key != "_":
                yield from iter_instance_dependencies(value, is_known)
