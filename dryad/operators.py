"""Binary and unary operators of the Dryad language.

Both functions take operands that are already evaluated. Every operand is
evaluated by the caller, so ``&&`` and ``||`` do not short-circuit.
"""

from __future__ import annotations

import math
from typing import Any, Callable, Dict, Tuple

from .errors import DryadError
from .values import is_truthy, to_display, values_equal

__all__ = ["binary_op", "unary_op"]

_I64_MIN = -(2**63)
_I64_MAX = 2**63 - 1


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_odd_integer(number: float) -> bool:
    return math.isfinite(number) and number.is_integer() and int(number) % 2 == 1


def _powf(base: float, exponent: float) -> float:
    """IEEE power: infinities and NaN instead of Python exceptions."""
    try:
        return math.pow(base, exponent)
    except OverflowError:
        if base < 0 and _is_odd_integer(exponent):
            return -math.inf
        return math.inf
    except ValueError:
        if base == 0 and exponent < 0:
            if _is_odd_integer(exponent):
                return math.copysign(math.inf, base)
            return math.inf
        return math.nan


def _fmod(a: float, b: float) -> float:
    """Remainder with the sign of the dividend; NaN where undefined."""
    try:
        return math.fmod(a, b)
    except ValueError:
        return math.nan


def _to_i64(number: float) -> int:
    """Saturating float-to-integer conversion; NaN becomes zero."""
    if math.isnan(number):
        return 0
    if math.isinf(number):
        return _I64_MAX if number > 0 else _I64_MIN
    return min(max(int(number), _I64_MIN), _I64_MAX)


def _from_i64(number: int) -> float:
    # Results of bitwise operators are reinterpreted as signed 64-bit integers.
    number &= (1 << 64) - 1
    if number >= 1 << 63:
        number -= 1 << 64
    return float(number)


def _numbers(left: Any, right: Any, code: int, message: str) -> Tuple[float, float]:
    if _is_number(left) and _is_number(right):
        return float(left), float(right)
    raise DryadError(code, message)


def _add(left: Any, right: Any) -> Any:
    if _is_number(left) and _is_number(right):
        return float(left) + float(right)
    if isinstance(left, str) or isinstance(right, str):
        return to_display(left) + to_display(right)
    raise DryadError(3004, "Operação '+' inválida para estes tipos")


def _arith(code: int, symbol: str, op: Callable[[float, float], float]):
    message = f"Operação '{symbol}' só é válida para números"

    def apply(left: Any, right: Any) -> float:
        a, b = _numbers(left, right, code, message)
        return op(a, b)

    return apply


def _guarded(
    code: int, symbol: str, zero_code: int, zero_message: str,
    op: Callable[[float, float], float],
):
    message = f"Operação '{symbol}' só é válida para números"

    def apply(left: Any, right: Any) -> float:
        a, b = _numbers(left, right, code, message)
        if b == 0:
            raise DryadError(zero_code, zero_message)
        return op(a, b)

    return apply


def _safe_modulo(a: float, b: float) -> float:
    divisor = abs(b)
    result = _fmod(a, divisor)
    return result + divisor if result < 0 else result


def _bitwise(code: int, symbol: str, op: Callable[[int, int], int]):
    return _arith(code, symbol, lambda a, b: _from_i64(op(_to_i64(a), _to_i64(b))))


def _shift(code: int, negative_code: int, symbol: str, left_shift: bool):
    message = f"Operação '{symbol}' só é válida para números"

    def apply(left: Any, right: Any) -> float:
        a, b = _numbers(left, right, code, message)
        if b < 0:
            raise DryadError(
                negative_code, "Não é possível fazer shift com número negativo"
            )
        factor = _powf(2.0, b)
        return a * factor if left_shift else a / factor

    return apply


def _comparison(op: Callable[[float, float], bool]):
    def apply(left: Any, right: Any) -> bool:
        a, b = _numbers(left, right, 3009, "Comparação só é válida para números")
        return op(a, b)

    return apply


_BINARY: Dict[str, Callable[[Any, Any], Any]] = {
    "+": _add,
    "-": _arith(3005, "-", lambda a, b: a - b),
    "*": _arith(3006, "*", lambda a, b: a * b),
    "/": _guarded(3008, "/", 3007, "Divisão por zero", lambda a, b: a / b),
    "%": _guarded(3016, "%", 3015, "Divisão por zero no operador %", _fmod),
    "**": _arith(3017, "**", _powf),
    "^^": _guarded(
        3021, "^^", 3020, "Raiz de índice zero não é válida",
        lambda a, b: _powf(a, 1.0 / b),
    ),
    "%%": _guarded(3023, "%%", 3022, "Divisão por zero no operador %%", _safe_modulo),
    "##": _arith(3024, "##", lambda a, b: a * _powf(10.0, b)),
    "&": _bitwise(3026, "&", lambda a, b: a & b),
    "|": _bitwise(3027, "|", lambda a, b: a | b),
    "^": _bitwise(3028, "^", lambda a, b: a ^ b),
    "<<": _shift(3030, 3029, "<<", True),
    ">>": _shift(3032, 3031, ">>", False),
    "<<<": _shift(3034, 3033, "<<<", True),
    ">>>": _shift(3036, 3035, ">>>", False),
    "==": values_equal,
    "!=": lambda left, right: not values_equal(left, right),
    "<": _comparison(lambda a, b: a < b),
    ">": _comparison(lambda a, b: a > b),
    "<=": _comparison(lambda a, b: a <= b),
    ">=": _comparison(lambda a, b: a >= b),
    "&&": lambda left, right: is_truthy(left) and is_truthy(right),
    "||": lambda left, right: is_truthy(left) or is_truthy(right),
    "!": lambda left, right: not is_truthy(right),
}


def binary_op(operator: str, left: Any, right: Any) -> Any:
    """Apply a binary operator to two evaluated operands."""
    try:
        apply = _BINARY[operator]
    except KeyError:
        raise DryadError(3002, f"Operador desconhecido: {operator}") from None
    return apply(left, right)


def unary_op(operator: str, value: Any) -> Any:
    """Apply a prefix operator to an evaluated operand."""
    if operator == "-":
        if _is_number(value):
            return -float(value)
        raise DryadError(3005, "Operação '-' só é válida para números")
    if operator == "!":
        return not is_truthy(value)
    raise DryadError(3006, f"Operador unário '{operator}' desconhecido")