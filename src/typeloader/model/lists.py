"""Lists: ordered, keyed, mutable containers of elements.

Elements are identified by their `key`. A list never holds two elements
with the same key: adding a value whose key is already present updates the
existing element instead.

Every write operation converts all given values before changing anything,
so an invalid value rejects the whole call.

Usage:
    Numbers = List.extend(type_spec={"of": Number})
    numbers = Numbers([1, 2, 3, 4])
    numbers.set([1, 3, 5])     # removes 2 and 4, updates 1 and 3, appends 5
    numbers.remove_at(-1)      # removes 5
    numbers.insert([0], 0)     # [0, 1, 3]
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from typing import Any, ClassVar, Self

from typeloader.core.specification import SpecificationContext
from typeloader.errors import ArgumentInvalidError, ArgumentInvalidTypeError
from typeloader.model.instance import Instance, Type
from typeloader.model.value import Element, Value

type _Update = tuple[Element, Element]
type _SetPlan = tuple[set[str] | None, list[_Update], list[Element]]


def _as_values(values: Any) -> list[Any]:
    if values is None:
        return []
    if isinstance(values, List):
        return values.to_array()
    if isinstance(values, (str, Mapping, Instance)) or not isinstance(values, Iterable):
        return [values]
    return list(values)


class ListType(Type):
    """Descriptor of list types.

    Attributes:
        of: The element type. Defaults to the ancestor's, `element` at the root.
            Derived list types may only narrow it.
    """

    is_list: ClassVar[bool] = True

    def _init(self, spec: Mapping[str, Any]) -> None:
        ancestor = self.ancestor
        self._of: Type = ancestor.of if isinstance(ancestor, ListType) else Element.type

    @property
    def of(self) -> Type:
        return self._of

    def _configure_special(self, key: str, value: Any) -> bool:
        if key != "of":
            return False
        if value is None:
            return True
        self._assert_configuring(key)

        if isinstance(value, Type):
            of = value
        elif isinstance(value, type) and issubclass(value, Instance):
            of = value.type
        else:
            of = self.loader.resolve_type(value).type

        if not of.is_subtype_of(Element.type):
            raise ArgumentInvalidError("spec.of", f"List element type '{of}' is not an element type.")
        if not of.is_subtype_of(self._of):
            raise ArgumentInvalidError(
                "spec.of", f"List element type '{of}' is not a subtype of the inherited '{self._of}'."
            )
        self._of = of
        return True

    def _fill_spec(self, spec: dict[str, Any], context: SpecificationContext) -> None:
        ancestor = self.ancestor
        if not isinstance(ancestor, ListType) or ancestor.of is not self._of:
            spec["of"] = self._of.to_ref(context)


class List(Value, type_spec={"id": "typeloader/list", "alias": "list"}):
    """A list of elements.

    Args:
        spec: None, an iterable of element specifications, or a mapping with
            the elements under "d".
    """

    type_class = ListType

    def __init__(self, spec: Any = None, **key_args: Any) -> None:
        super().__init__(spec, **key_args)
        self._elems: list[Element] = []
        self._keys: dict[str, Element] = {}

        if isinstance(spec, Mapping):
            spec = spec.get("d")
        elif spec is not None and (isinstance(spec, str) or not isinstance(spec, Iterable)):
            raise ArgumentInvalidTypeError("spec", ["Iterable", "Mapping"], type(spec).__name__)
        self._insert(self._cast_all(spec), len(self._elems), update=False)

    # region Read
    @property
    def count(self) -> int:
        """The number of elements."""
        return len(self._elems)

    def at(self, index: int) -> Element | None:
        """Get the element at a position, or None if out of range."""
        if 0 <= index < len(self._elems):
            return self._elems[index]
        return None

    def has(self, key: str) -> bool:
        """Check if an element with the given key exists."""
        return key in self._keys

    def get(self, key: str) -> Element | None:
        """Get the element with the given key, or None."""
        return self._keys.get(key)

    def includes(self, elem: Element) -> bool:
        """Check if this exact element is in the list."""
        return elem is not None and self._keys.get(elem.key) is elem

    def index_of(self, elem: Element) -> int:
        """Get the position of this exact element, or -1."""
        if not self.includes(elem):
            return -1
        for index, item in enumerate(self._elems):
            if item is elem:
                return index
        return -1

    def to_array(self) -> list[Element]:
        """Get a copy of the elements."""
        return list(self._elems)

    def __iter__(self) -> Iterator[Element]:
        return iter(list(self._elems))

    def __len__(self) -> int:
        return len(self._elems)

    def __getitem__(self, index: int) -> Element:
        return self._elems[index]
    # endregion

    # region Write
    def add(self, values: Any) -> None:
        """Append elements. Values with the key of an existing element update it in place."""
        self._insert(self._cast_all(values), len(self._elems))

    def insert(self, values: Any, index: int | None = None) -> None:
        """Insert elements at a position, with the update semantics of `add`.

        Args:
            values: Element or elements to insert.
            index: Insertion position. Negative positions count from the end
                (clamped to 0); positions past the end append.
        """
        elems = self._cast_all(values)
        count = len(self._elems)
        if index is None or index > count:
            index = count
        elif index < 0:
            index = max(0, count + index)
        self._insert(elems, index)

    def remove(self, values: Any) -> None:
        """Remove elements, matched by identity.

        Values equal to, but distinct from, an element of the list are ignored.
        """
        doomed = {id(elem) for elem in _as_values(values) if isinstance(elem, Element) and self.includes(elem)}
        if doomed:
            self._remove_where(lambda elem: id(elem) in doomed)

    def remove_at(self, start: int, count: int | None = None) -> None:
        """Remove `count` elements starting at `start`.

        Args:
            start: First position. Negative positions count from the end.
            count: Number of elements. Defaults to 1; values below 1 remove nothing.
        """
        if count is None:
            count = 1
        size = len(self._elems)
        if count < 1:
            return
        if start < 0:
            start = max(0, size + start)
        elif start >= size:
            return

        removed = self._elems[start : start + count]
        del self._elems[start : start + count]
        for elem in removed:
            del self._keys[elem.key]

    def set(
        self,
        values: Any,
        *,
        no_add: bool = False,
        no_update: bool = False,
        no_remove: bool = False,
    ) -> None:
        """Reconcile the list with the given elements.

        Elements absent from `values` are removed, elements present in both
        are updated and new elements are appended, unless the matching flag
        suppresses that kind of change. Kept elements keep their positions.
        """
        self._apply_set(self._plan_set(values, no_add=no_add, no_update=no_update, no_remove=no_remove))

    def clear(self) -> None:
        """Remove all elements."""
        self._elems.clear()
        self._keys.clear()
    # endregion

    # region Internals
    def _cast(self, value: Any) -> Element | None:
        return self.type.of.to_value(value, self.type.loader)

    def _cast_all(self, values: Any) -> list[Element]:
        elems = []
        for value in _as_values(values):
            elem = self._cast(value)
            if elem is not None:
                elems.append(elem)
        return elems

    @staticmethod
    def _dedupe(elems: list[Element]) -> list[Element]:
        seen: dict[str, Element] = {}
        for elem in elems:
            seen.setdefault(elem.key, elem)
        return list(seen.values())

    def _insert(self, elems: list[Element], index: int, *, update: bool = True) -> None:
        new, updates = self._plan_insert(elems, update=update)
        self._apply_updates(updates)
        self._splice(new, index)

    def _plan_insert(self, elems: list[Element], *, update: bool) -> tuple[list[Element], list[_Update]]:
        # Every update is validated here, before the caller mutates anything.
        new: list[Element] = []
        updates: list[_Update] = []
        for elem in self._dedupe(elems):
            existing = self._keys.get(elem.key)
            if existing is None:
                new.append(elem)
            elif update and existing is not elem:
                existing.check_update_from(elem)
                updates.append((existing, elem))
        return new, updates

    def _plan_set(
        self,
        values: Any,
        *,
        no_add: bool = False,
        no_update: bool = False,
        no_remove: bool = False,
    ) -> _SetPlan:
        elems = self._dedupe(self._cast_all(values))
        new, updates = self._plan_insert(elems, update=not no_update)
        kept_keys = None if no_remove else {elem.key for elem in elems}
        return kept_keys, updates, [] if no_add else new

    def _apply_set(self, plan: _SetPlan) -> None:
        kept_keys, updates, new = plan
        if kept_keys is not None:
            self._remove_where(lambda elem: elem.key not in kept_keys)
        self._apply_updates(updates)
        self._splice(new, len(self._elems))

    @staticmethod
    def _apply_updates(updates: list[_Update]) -> None:
        for existing, elem in updates:
            existing._update_from(elem)

    def _splice(self, elems: list[Element], index: int) -> None:
        self._elems[index:index] = elems
        for elem in elems:
            self._keys[elem.key] = elem

    def _remove_where(self, predicate: Any) -> None:
        kept = []
        for elem in self._elems:
            if predicate(elem):
                del self._keys[elem.key]
            else:
                kept.append(elem)
        self._elems[:] = kept
    # endregion

    def clone(self) -> Self:
        return type(self)(self._elems)

    def to_spec(self) -> list[Any]:
        """Get the specifications of the elements."""
        return [elem.to_spec() for elem in self._elems]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.to_spec()!r})"
