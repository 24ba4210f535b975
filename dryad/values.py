"""Runtime values of Dryad programs.

Numbers are Python floats, strings are ``str``, booleans are ``bool`` and
null is ``None``. Arrays are lists and tuples are tuples. The remaining kinds
of value are the classes defined here.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Optional, Tuple

from .nodes import Visibility

__all__ = [
    "DryadException",
    "FunctionValue",
    "LambdaValue",
    "ClassMethod",
    "ClassProperty",
    "ClassValue",
    "Instance",
    "ObjectMethod",
    "ObjectValue",
    "to_display",
    "is_truthy",
    "values_equal",
    "same_value",
]

_I64_MIN = -(2**63)
_I64_MAX = 2**63 - 1


@dataclass(frozen=True)
class DryadException:
    """An exception value, as bound to the variable of a ``catch`` clause."""

    message: str


@dataclass(frozen=True)
class FunctionValue:
    """A function declared with ``function name(params) { ... }``."""

    name: str
    params: Tuple[str, ...]
    body: Any

    def __post_init__(self) -> None:
        object.__setattr__(self, "params", tuple(self.params))


@dataclass(eq=False)
class LambdaValue:
    """A lambda with an expression body and the scope it was created in."""

    params: Tuple[str, ...]
    body: Any
    closure: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.params = tuple(self.params)


@dataclass(frozen=True)
class ClassMethod:
    """A method of a class."""

    visibility: Visibility
    is_static: bool
    params: Tuple[str, ...]
    body: Any

    def __post_init__(self) -> None:
        object.__setattr__(self, "params", tuple(self.params))


@dataclass(eq=False)
class ClassProperty:
    """A property of a class with its evaluated default value, if any."""

    visibility: Visibility
    is_static: bool
    default_value: Any = None


@dataclass(eq=False)
class ClassValue:
    """A class definition."""

    name: str
    parent: Optional[str] = None
    methods: Dict[str, ClassMethod] = field(default_factory=dict)
    properties: Dict[str, ClassProperty] = field(default_factory=dict)


@dataclass(eq=False)
class Instance:
    """An instance of a class, holding its own property values."""

    class_name: str
    properties: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ObjectMethod:
    """A method defined inside an object literal."""

    params: Tuple[str, ...]
    body: Any

    def __post_init__(self) -> None:
        object.__setattr__(self, "params", tuple(self.params))


@dataclass(eq=False)
class ObjectValue:
    """The value of an object literal."""

    properties: Dict[str, Any] = field(default_factory=dict)
    methods: Dict[str, ObjectMethod] = field(default_factory=dict)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _format_number(number: float) -> str:
    number = float(number)
    if math.isnan(number):
        return "NaN"
    if math.isinf(number):
        return "inf" if number > 0 else "-inf"
    if number.is_integer():
        return str(min(max(int(number), _I64_MIN), _I64_MAX))
    text = repr(number)
    if "e" in text or "E" in text:
        text = format(Decimal(text), "f")
    return text


def to_display(value: Any) -> str:
    """Render a value the way Dryad prints it."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if _is_number(value):
        return _format_number(value)
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        return "[" + ", ".join(to_display(item) for item in value) + "]"
    if isinstance(value, tuple):
        return "(" + ", ".join(to_display(item) for item in value) + ")"
    if isinstance(value, DryadException):
        return f"Exception: {value.message}"
    if isinstance(value, FunctionValue):
        return f"function {value.name}"
    if isinstance(value, LambdaValue):
        return f"({', '.join(value.params)}) => lambda"
    if isinstance(value, ClassValue):
        return f"class {value.name}"
    if isinstance(value, Instance):
        return f"instance of {value.class_name}"
    if isinstance(value, ObjectValue):
        parts = ", ".join(
            f"{key}: {to_display(item)}" for key, item in value.properties.items()
        )
        return "{ " + parts + " }"
    raise TypeError(f"not a Dryad value: {value!r}")


def is_truthy(value: Any) -> bool:
    """Return whether a value counts as true in a condition."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if _is_number(value):
        return value != 0
    if isinstance(value, (str, list, tuple)):
        return len(value) > 0
    if isinstance(value, DryadException):
        return False
    return True


def values_equal(left: Any, right: Any) -> bool:
    """Equality as the ``==`` operator sees it: only primitives of one kind."""
    if left is None or right is None:
        return left is None and right is None
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right
    if _is_number(left) and _is_number(right):
        return float(left) == float(right)
    if isinstance(left, str) and isinstance(right, str):
        return left == right
    return False


def same_value(left: Any, right: Any) -> bool:
    """Structural equality of two values, comparing collections deeply."""
    if isinstance(left, list) and isinstance(right, list):
        return len(left) == len(right) and all(
            same_value(a, b) for a, b in zip(left, right)
        )
    if isinstance(left, tuple) and isinstance(right, tuple):
        return len(left) == len(right) and all(
            same_value(a, b) for a, b in zip(left, right)
        )
    if isinstance(left, DryadException) and isinstance(right, DryadException):
        return left.message == right.message
    if isinstance(left, FunctionValue) and isinstance(right, FunctionValue):
        return left.name == right.name and left.params == right.params
    if isinstance(left, ObjectValue) and isinstance(right, ObjectValue):
        lp, rp = left.properties, right.properties
        return lp.keys() == rp.keys() and all(same_value(lp[k], rp[k]) for k in lp)
    return values_equal(left, right)