"""Tests for class extension, override wiring and mixins."""

import pytest

from typeloader.core.classes import Base, calls_base, extend_class, mix_into, no_base
from typeloader.errors import ArgumentInvalidError, ArgumentInvalidTypeError


class Animal(Base):
    sound = "..."

    def __init__(self, name):
        self.name = name

    def speak(self):
        return self.sound

    def describe(self, prefix):
        return f"{prefix}{self.name}"

    @classmethod
    def kind(cls):
        return "animal"

    @property
    def title(self):
        return self._title

    @title.setter
    def title(self, value):
        self._title = value.strip()


def test_calls_base_detects_second_parameter():
    def with_base(self, base, x):
        return x

    def without_base(self, x):
        return x

    assert calls_base(with_base)
    assert not calls_base(without_base)
    assert not calls_base(42)


def test_override_receives_bound_ancestor_implementation():
    """CRITICAL: An override declaring `base` gets the ancestor method bound to self.

    Why: This replaces the implicit super-call slot of prototype chains.
    """

    def speak(self, base):
        return base() + "!"

    Dog = Animal.extend("Dog", {"speak": speak, "sound": "woof"})

    assert Dog("rex").speak() == "woof!"


def test_override_passes_arguments_through():
    def describe(self, base, prefix):
        return base(prefix.upper())

    Loud = Animal.extend({"describe": describe})

    assert Loud("rex").describe("a ") == "A rex"


def test_override_without_ancestor_gets_no_base():
    def greet(self, base):
        return base()

    Greeter = Animal.extend("Greeter", {"greet": greet})

    assert Greeter("x").greet() is None


def test_extend_does_not_mutate_base():
    """CRITICAL: Extension never changes the base class.

    Why: Independent subtypes of the same base must not affect each other.
    """

    def speak(self, base):
        return "meow"

    Cat = Animal.extend("Cat", {"speak": speak})
    Cow = Animal.extend("Cow", {"sound": "moo"})

    assert Animal("a").speak() == "..."
    assert Cat("c").speak() == "meow"
    assert Cow("c").speak() == "moo"
    assert issubclass(Cat, Animal) and issubclass(Cow, Animal)
    assert Cat.__name__ == "Cat"


def test_override_chain_three_levels():
    def speak_b(self, base):
        return base() + "b"

    def speak_c(self, base):
        return base() + "c"

    B = Animal.extend({"speak": speak_b, "sound": "a"})
    C = B.extend({"speak": speak_c})

    assert C("x").speak() == "abc"
    assert B("x").speak() == "ab"


def test_override_restored_after_exception():
    """Override wiring holds across failing calls.

    Why: The ancestor implementation is a parameter, not a slot to restore.
    """

    def speak(self, base):
        raise RuntimeError(base())

    Failing = Animal.extend({"speak": speak, "sound": "x"})
    with pytest.raises(RuntimeError, match="x"):
        Failing("f").speak()

    def speak_again(self, base):
        return base() + "?"

    Child = Failing.extend({"speak": speak_again})
    with pytest.raises(RuntimeError):
        Child("c").speak()


def test_class_spec_functions_become_class_methods():
    def kind(cls, base):
        return f"{base()}:{cls.__name__}"

    Bird = Animal.extend("Bird", None, {"kind": kind})

    assert Bird.kind() == "animal:Bird"


def test_accessor_override_merges_field_by_field():
    """CRITICAL: Overriding only a getter keeps the inherited setter.

    Why: Accessor pairs are merged, not replaced wholesale.
    """

    def title(self, base):
        return base().upper()

    Named = Animal.extend({"title": property(title)})
    named = Named("n")
    named.title = "  hello "

    assert named.title == "HELLO"
    assert named._title == "hello"


def test_method_over_plain_field_is_rejected():
    def sound(self):
        return "x"

    with pytest.raises(ArgumentInvalidError):
        Animal.extend({"sound": sound})


def test_mix_applies_members_with_override_wiring():
    class Shouting:
        def speak(self, base):
            return base().upper()

        def shout(self):
            return self.speak() * 2

    Quiet = Animal.extend({"sound": "hi"})
    Quiet.mix(Shouting)

    assert Quiet("q").speak() == "HI"
    assert Quiet("q").shout() == "HIHI"
    assert Shouting.__dict__["speak"] is not Quiet.__dict__["speak"]


def test_mix_does_not_change_mixin():
    class Mixin:
        def speak(self, base):
            return "mixed " + base()

    Target = Animal.extend({})
    mix_into(Target, Mixin)

    assert Target("t").speak() == "mixed ..."
    assert "speak" in Mixin.__dict__ and Mixin.__dict__["speak"].__name__ == "speak"
    assert calls_base(Mixin.__dict__["speak"])


def test_mix_skips_classes_target_already_inherits():
    class Extra(Animal):
        def extra(self):
            return "extra"

    Target = Animal.extend({"sound": "t"})
    Target.mix(Extra)

    assert Target("t").extra() == "extra"
    assert Target("t").speak() == "t"


def test_implement_applies_specs_in_order():
    def speak_one(self, base):
        return base() + "1"

    def speak_two(self, base):
        return base() + "2"

    Target = Animal.extend({"sound": "0"})
    Target.implement({"speak": speak_one}, None, {"speak": speak_two})

    assert Target("t").speak() == "012"


def test_implement_static():
    def kind(cls, base):
        return base() + "+"

    Target = Animal.extend({})
    Target.implement_static({"kind": kind})

    assert Target.kind() == "animal+"


def test_mix_rejects_invalid_spec():
    with pytest.raises(ArgumentInvalidTypeError):
        mix_into(Animal.extend({}), 42)


def test_extend_class_forwards_class_keywords():
    seen = {}

    class Recorder(Base):
        def __init_subclass__(cls, tag=None, **kwargs):
            super().__init_subclass__(**kwargs)
            seen[cls.__name__] = tag

    extend_class(Recorder, "Tagged", tag="t1")

    assert seen == {"Tagged": "t1"}


def test_no_base_returns_none():
    assert no_base(1, key=2) is None
