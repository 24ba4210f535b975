"""Syntax tree nodes for Dryad programs.

Every node is an immutable dataclass. Sequence fields accept any iterable
and are stored as tuples, so nodes compare by value and can be hashed.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Iterator, Optional, Tuple, Union

__all__ = [
    "Visibility",
    "Literal",
    "Variable",
    "Binary",
    "Unary",
    "Call",
    "PostIncrement",
    "PostDecrement",
    "PreIncrement",
    "PreDecrement",
    "ArrayLiteral",
    "TupleLiteral",
    "Index",
    "TupleAccess",
    "Lambda",
    "This",
    "Super",
    "MethodCall",
    "PropertyAccess",
    "ClassInstantiation",
    "ObjectLiteral",
    "PropertyEntry",
    "MethodEntry",
    "Expression",
    "VarDeclaration",
    "Assignment",
    "PropertyAssignment",
    "Block",
    "If",
    "IfElse",
    "While",
    "DoWhile",
    "Break",
    "Continue",
    "For",
    "ForEach",
    "CatchClause",
    "Try",
    "Throw",
    "FunctionDeclaration",
    "MethodMember",
    "PropertyMember",
    "ClassDeclaration",
    "Return",
    "Program",
]


def _freeze(node: object, *names: str) -> None:
    """Store the named fields of a frozen dataclass as tuples."""
    for name in names:
        object.__setattr__(node, name, tuple(getattr(node, name)))


class Visibility(enum.Enum):
    """Access level of a class member."""

    PUBLIC = "public"
    PRIVATE = "private"
    PROTECTED = "protected"


# ---------------------------------------------------------------- expressions


@dataclass(frozen=True)
class Literal:
    """A number, string, boolean or null constant."""

    value: Union[float, str, bool, None]

    def __post_init__(self) -> None:
        value = self.value
        if isinstance(value, bool) or value is None or isinstance(value, str):
            return
        if isinstance(value, (int, float)):
            object.__setattr__(self, "value", float(value))
            return
        raise TypeError(f"unsupported literal value: {value!r}")


@dataclass(frozen=True)
class Variable:
    """A reference to a named variable."""

    name: str


@dataclass(frozen=True)
class Binary:
    """A binary operation such as ``a + b``."""

    left: _Expr
    operator: str
    right: _Expr


@dataclass(frozen=True)
class Unary:
    """A prefix operation such as ``-a`` or ``!a``."""

    operator: str
    operand: _Expr


@dataclass(frozen=True)
class Call:
    """A call of a function, lambda or class by expression."""

    callee: _Expr
    args: Tuple[_Expr, ...] = ()

    def __post_init__(self) -> None:
        _freeze(self, "args")


@dataclass(frozen=True)
class PostIncrement:
    """``x++``: yields the old value, then increments."""

    target: _Expr


@dataclass(frozen=True)
class PostDecrement:
    """``x--``: yields the old value, then decrements."""

    target: _Expr


@dataclass(frozen=True)
class PreIncrement:
    """``++x``: increments, then yields the new value."""

    target: _Expr


@dataclass(frozen=True)
class PreDecrement:
    """``--x``: decrements, then yields the new value."""

    target: _Expr


@dataclass(frozen=True)
class ArrayLiteral:
    """``[a, b, c]``."""

    elements: Tuple[_Expr, ...] = ()

    def __post_init__(self) -> None:
        _freeze(self, "elements")


@dataclass(frozen=True)
class TupleLiteral:
    """``(a, b, c)``."""

    elements: Tuple[_Expr, ...] = ()

    def __post_init__(self) -> None:
        _freeze(self, "elements")


@dataclass(frozen=True)
class Index:
    """``array[index]``."""

    target: _Expr
    index: _Expr


@dataclass(frozen=True)
class TupleAccess:
    """``tuple.N`` with a fixed, non-negative position."""

    target: _Expr
    index: int

    def __post_init__(self) -> None:
        if isinstance(self.index, bool) or not isinstance(self.index, int):
            raise TypeError("tuple access index must be an integer")
        if self.index < 0:
            raise ValueError("tuple access index must not be negative")


@dataclass(frozen=True)
class Lambda:
    """``(params) => body`` with an expression body."""

    params: Tuple[str, ...]
    body: _Expr

    def __post_init__(self) -> None:
        _freeze(self, "params")


@dataclass(frozen=True)
class This:
    """The ``this`` keyword."""


@dataclass(frozen=True)
class Super:
    """The ``super`` keyword."""


@dataclass(frozen=True)
class MethodCall:
    """``target.method(args)``."""

    target: _Expr
    method: str
    args: Tuple[_Expr, ...] = ()

    def __post_init__(self) -> None:
        _freeze(self, "args")


@dataclass(frozen=True)
class PropertyAccess:
    """``target.name``."""

    target: _Expr
    name: str


@dataclass(frozen=True)
class ClassInstantiation:
    """Creation of an instance of a named class."""

    class_name: str
    args: Tuple[_Expr, ...] = ()

    def __post_init__(self) -> None:
        _freeze(self, "args")


@dataclass(frozen=True)
class PropertyEntry:
    """``key: value`` inside an object literal."""

    key: str
    value: _Expr


@dataclass(frozen=True)
class MethodEntry:
    """``key(params) { body }`` inside an object literal."""

    key: str
    params: Tuple[str, ...]
    body: _Stmt

    def __post_init__(self) -> None:
        _freeze(self, "params")


@dataclass(frozen=True)
class ObjectLiteral:
    """``{ key: value, method() { ... } }``."""

    entries: Tuple[Union[PropertyEntry, MethodEntry], ...] = ()

    def __post_init__(self) -> None:
        _freeze(self, "entries")


# ----------------------------------------------------------------- statements


@dataclass(frozen=True)
class Expression:
    """An expression used as a statement."""

    expr: _Expr


@dataclass(frozen=True)
class VarDeclaration:
    """``let name = initializer;``; without an initializer the value is null."""

    name: str
    initializer: Optional[_Expr] = None


@dataclass(frozen=True)
class Assignment:
    """``name = value;`` on an already declared variable."""

    name: str
    value: _Expr


@dataclass(frozen=True)
class PropertyAssignment:
    """``target.name = value;``."""

    target: _Expr
    name: str
    value: _Expr


@dataclass(frozen=True)
class Block:
    """``{ statements }`` with its own scope for declarations."""

    statements: Tuple[_Stmt, ...] = ()

    def __post_init__(self) -> None:
        _freeze(self, "statements")

    def __iter__(self) -> Iterator[_Stmt]:
        return iter(self.statements)

    def __len__(self) -> int:
        return len(self.statements)


@dataclass(frozen=True)
class If:
    """``if condition { ... }``."""

    condition: _Expr
    then_branch: _Stmt


@dataclass(frozen=True)
class IfElse:
    """``if condition { ... } else { ... }``."""

    condition: _Expr
    then_branch: _Stmt
    else_branch: _Stmt


@dataclass(frozen=True)
class While:
    """``while condition { ... }``."""

    condition: _Expr
    body: _Stmt


@dataclass(frozen=True)
class DoWhile:
    """``do { ... } while condition;``; the body runs at least once."""

    body: _Stmt
    condition: _Expr


@dataclass(frozen=True)
class Break:
    """``break;``."""


@dataclass(frozen=True)
class Continue:
    """``continue;``."""


@dataclass(frozen=True)
class For:
    """``for init; condition; update { ... }``; every header part is optional."""

    init: Optional[_Stmt]
    condition: Optional[_Expr]
    update: Optional[_Stmt]
    body: _Stmt


@dataclass(frozen=True)
class ForEach:
    """``for variable in iterable { ... }``."""

    variable: str
    iterable: _Expr
    body: _Stmt


@dataclass(frozen=True)
class CatchClause:
    """``catch (variable) { ... }``."""

    variable: str
    body: _Stmt


@dataclass(frozen=True)
class Try:
    """``try { ... } catch (e) { ... } finally { ... }``."""

    body: _Stmt
    catch: Optional[CatchClause] = None
    finally_body: Optional[_Stmt] = None


@dataclass(frozen=True)
class Throw:
    """``throw value;``."""

    value: _Expr


@dataclass(frozen=True)
class FunctionDeclaration:
    """``function name(params) { ... }``."""

    name: str
    params: Tuple[str, ...]
    body: _Stmt

    def __post_init__(self) -> None:
        _freeze(self, "params")


@dataclass(frozen=True)
class MethodMember:
    """A method declared inside a class body."""

    visibility: Visibility
    is_static: bool
    name: str
    params: Tuple[str, ...]
    body: _Stmt

    def __post_init__(self) -> None:
        _freeze(self, "params")


@dataclass(frozen=True)
class PropertyMember:
    """A property declared inside a class body, with an optional default."""

    visibility: Visibility
    is_static: bool
    name: str
    default: Optional[_Expr] = None


@dataclass(frozen=True)
class ClassDeclaration:
    """``class Name extends Parent { members }``."""

    name: str
    parent: Optional[str] = None
    members: Tuple[Union[MethodMember, PropertyMember], ...] = ()

    def __post_init__(self) -> None:
        _freeze(self, "members")


@dataclass(frozen=True)
class Return:
    """``return value;``; without a value null is returned."""

    value: Optional[_Expr] = None


@dataclass(frozen=True)
class Program:
    """A whole program: a sequence of top-level statements."""

    statements: Tuple[_Stmt, ...] = field(default=())

    def __post_init__(self) -> None:
        _freeze(self, "statements")

    def __iter__(self) -> Iterator[_Stmt]:
        return iter(self.statements)

    def __len__(self) -> int:
        return len(self.statements)


_Expr = Union[
    Literal,
    Variable,
    Binary,
    Unary,
    Call,
    PostIncrement,
    PostDecrement,
    PreIncrement,
    PreDecrement,
    ArrayLiteral,
    TupleLiteral,
    Index,
    TupleAccess,
    Lambda,
    This,
    Super,
    MethodCall,
    PropertyAccess,
    ClassInstantiation,
    ObjectLiteral,
]

_Stmt = Union[
    Expression,
    VarDeclaration,
    Assignment,
    PropertyAssignment,
    Block,
    If,
    IfElse,
    While,
    DoWhile,
    Break,
    Continue,
    For,
    ForEach,
    Try,
    Throw,
    FunctionDeclaration,
    ClassDeclaration,
    Return,
]