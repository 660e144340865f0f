import enum
import logging
from dataclasses import dataclass
from typing import Callable, Mapping, Optional, Union

import numpy as np

from exprcalc.builtins import BUILTIN_FUNCS, PREDEFINED_CONSTANTS
from exprcalc.lexical import (
    DIGITS,
    BinaryOperator,
    PrintableEnum,
    clean_text,
    is_binary_operator,
    is_identifier_start,
    is_unary_function_name,
    is_valid_numeric_literal,
    scan_number,
    scan_word,
)

logger = logging.getLogger(__name__)


@dataclass
class EvalError(Exception):
    errmsg: str

    def __str__(self) -> str:
        return self.errmsg


@dataclass
class UndefinedVariableError(EvalError):
    name: str


class ArityError(EvalError):
    pass


class InternalError(EvalError):
    """Raised for states that validated text cannot reach"""


class Group(PrintableEnum):
    OPEN = enum.auto()
    NEGATED_OPEN = enum.auto()


StackEntry = Union[BinaryOperator, Group]
BinaryOperationImpl = Callable[[np.float64, np.float64], np.float64]


def _truncated_remainder(a: np.float64, b: np.float64) -> np.float64:
    # sign follows the dividend, fmod by zero is nan
    return np.fmod(np.trunc(a), np.trunc(b))


binary_operation_impls: dict[BinaryOperator, BinaryOperationImpl] = {
    BinaryOperator.ADD: lambda a, b: a + b,
    BinaryOperator.SUB: lambda a, b: a - b,
    BinaryOperator.MUL: lambda a, b: a * b,
    BinaryOperator.DIV: lambda a, b: a / b,
    BinaryOperator.POW: lambda a, b: np.power(a, b),
    BinaryOperator.MOD: _truncated_remainder,
}


def eval_binary_operation(operator: BinaryOperator, a: float, b: float) -> float:
    impl = binary_operation_impls.get(operator)
    if impl is None:
        raise InternalError(f"Unexpected binary operator: {operator}")
    with np.errstate(all="ignore"):
        return float(impl(np.float64(a), np.float64(b)))


def eval_unary_function(name: str, arg: float) -> float:
    impl = BUILTIN_FUNCS.get(name)
    if impl is None:
        raise InternalError(f"Unexpected function: {name!r}")
    return impl(arg)


def resolve_variable(name: str, binding: Mapping[str, float]) -> float:
    if name in binding:
        return float(binding[name])
    elif name in PREDEFINED_CONSTANTS:
        return PREDEFINED_CONSTANTS[name]
    else:
        logger.debug("Undefined variable %r, bound names: %s", name, sorted(binding))
        raise UndefinedVariableError(f"Variable {name!r} is undefined", name=name)


def evaluate(text: str, binding: Optional[Mapping[str, float]] = None) -> float:
    tokens = clean_text(text)
    if binding is None:
        binding = {}

    values: list[float] = []
    ops: list[StackEntry] = []
    calls: list[str] = []

    i = 0
    while i < len(tokens):
        ch = tokens[i]

        if ch == "(":
            negate = _negation_check(tokens, i, ops)
            ops.append(Group.NEGATED_OPEN if negate else Group.OPEN)
            i += 1

        elif ch in DIGITS:
            negate = _negation_check(tokens, i, ops)
            end = scan_number(tokens, i)
            literal = tokens[i:end]
            if not is_valid_numeric_literal(literal):
                raise InternalError(f"Invalid number {literal!r} at position {i}")
            value = float(literal)
            values.append(-value if negate else value)
            i = end

        elif is_identifier_start(ch):
            negate = _negation_check(tokens, i, ops)
            end = scan_word(tokens, i)
            word = tokens[i:end]
            if is_unary_function_name(word):
                calls.append(word)
                close_idx = _find_matching_paren(tokens, end)
                try:
                    arg = evaluate(tokens[end + 1 : close_idx], binding)
                except EvalError as e:
                    e.errmsg = f"Inside {calls[-1]}: {e.errmsg}"
                    raise
                value = eval_unary_function(calls.pop(), arg)
                i = close_idx + 1
            else:
                value = resolve_variable(word, binding)
                i = end
            values.append(-value if negate else value)

        elif ch == ")":
            while ops and not isinstance(ops[-1], Group):
                _reduce(values, ops)
            if not ops:
                raise InternalError(f"Unmatched closing parenthesis at position {i}")
            if ops.pop() is Group.NEGATED_OPEN:
                if not values:
                    raise ArityError("Empty parenthesis")
                values[-1] = -values[-1]
            i += 1

        # resolve pending operators that bind at least as tightly, unless this is a negation minus
        elif is_binary_operator(ch):
            incoming = BinaryOperator(ch)
            while ops and i > 0 and not is_binary_operator(tokens[i - 1]) and _has_precedence(ops[-1], incoming):
                _reduce(values, ops)
            ops.append(incoming)
            i += 1

        else:
            raise InternalError(f"Unexpected character {ch!r} at position {i}")

    while ops:
        if isinstance(ops[-1], Group):
            raise InternalError("Unclosed parenthesis")
        _reduce(values, ops)

    if not values:
        raise ArityError("Nothing to evaluate")
    if len(values) > 1:
        raise ArityError("Too many operands were found")
    return values[0]


def _has_precedence(top: StackEntry, incoming: BinaryOperator) -> bool:
    if isinstance(top, Group):
        return False
    return top.precedence >= incoming.precedence


def _reduce(values: list[float], ops: list[StackEntry]) -> None:
    if len(values) < 2:
        raise ArityError("Too many operators were found")
    operator = ops.pop()
    if isinstance(operator, Group):
        raise InternalError("Unclosed parenthesis")
    b = values.pop()
    a = values.pop()
    values.append(eval_binary_operation(operator, a, b))


def _negation_check(tokens: str, i: int, ops: list[StackEntry]) -> bool:
    """Mutates passed ops list: a negating minus was already pushed as an operator and is dropped"""
    if i == 0 or tokens[i - 1] != "-":
        return False
    if i >= 2 and not is_binary_operator(tokens[i - 2]) and tokens[i - 2] != "(":
        return False
    if not ops or ops[-1] is not BinaryOperator.SUB:
        raise InternalError(f"Dangling negation at position {i - 1}")
    ops.pop()
    return True


def _find_matching_paren(tokens: str, open_idx: int) -> int:
    if open_idx >= len(tokens) or tokens[open_idx] != "(":
        raise InternalError(f"Expected '(' at position {open_idx}")
    depth = 0
    for j in range(open_idx, len(tokens)):
        if tokens[j] == "(":
            depth += 1
        elif tokens[j] == ")":
            depth -= 1
            if depth == 0:
                return j
    raise InternalError(f"Unclosed parenthesis at position {open_idx}")
