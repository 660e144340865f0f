import math
from types import MappingProxyType
from typing import Callable, Mapping

import numpy as np

from exprcalc.lexical import UNARY_FUNCTION_NAMES

UnaryFunctionImpl = Callable[[float], float]

PREDEFINED_CONSTANTS: Mapping[str, float] = MappingProxyType({"PI": math.pi, "E": math.e})

_builtin_funcs: dict[str, UnaryFunctionImpl] = dict()
BUILTIN_FUNCS: Mapping[str, UnaryFunctionImpl] = MappingProxyType(_builtin_funcs)


def register_builtin_func(name: str):
    if name not in UNARY_FUNCTION_NAMES:
        raise ValueError(f"{name!r} is not a reserved function name")

    def decorator(fn: Callable[[np.float64], np.float64]) -> UnaryFunctionImpl:
        def decorated(arg: float) -> float:
            # domain errors become nan/inf instead of warnings
            with np.errstate(all="ignore"):
                return float(fn(np.float64(arg)))

        _builtin_funcs[name] = decorated
        return decorated

    return decorator


@register_builtin_func("sqrt")
def sqrt_(arg: np.float64) -> np.float64:
    return np.sqrt(arg)


@register_builtin_func("round")
def round_(arg: np.float64) -> np.float64:
    """Half-up rounding on the truncated value, so round(-2.5) == -2"""
    whole = np.trunc(arg)
    if arg - whole >= 0.5:
        return whole + 1
    return whole


@register_builtin_func("abs")
def abs_(arg: np.float64) -> np.float64:
    return np.abs(arg)


@register_builtin_func("sin")
def sin_(arg: np.float64) -> np.float64:
    return np.sin(arg)


@register_builtin_func("cos")
def cos_(arg: np.float64) -> np.float64:
    return np.cos(arg)


@register_builtin_func("tan")
def tan_(arg: np.float64) -> np.float64:
    return np.tan(arg)


@register_builtin_func("asin")
def asin_(arg: np.float64) -> np.float64:
    return np.arcsin(arg)


@register_builtin_func("acos")
def acos_(arg: np.float64) -> np.float64:
    return np.arccos(arg)


@register_builtin_func("atan")
def atan_(arg: np.float64) -> np.float64:
    return np.arctan(arg)


@register_builtin_func("rad2deg")
def rad2deg_(arg: np.float64) -> np.float64:
    return 180.0 * arg / PREDEFINED_CONSTANTS["PI"]


@register_builtin_func("log")
def log_(arg: np.float64) -> np.float64:
    return np.log10(arg)


@register_builtin_func("ln")
def ln_(arg: np.float64) -> np.float64:
    return np.log(arg)
