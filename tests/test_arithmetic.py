import math

import pytest

from exprcalc.expression import Expression
from exprcalc.runtime import ArityError, InternalError, eval_unary_function, evaluate


@pytest.mark.parametrize(
    "code, expected_ret_val",
    [
        pytest.param("1", 1.0),
        pytest.param("-1", -1.0),
        pytest.param("1+2", 3.0),
        pytest.param("(1+2)", 3.0),
        pytest.param("-(1+2)", -3.0),
        pytest.param("(((1)))", 1.0),
        pytest.param("1 * 4 + 5", 9.0),
        pytest.param("1 + 4 * 5", 21.0),
        pytest.param("10 / 5 / 2 / 2", 0.5),
        pytest.param("10 + 2 * (5 + 3 - 1)", 24.0),
        pytest.param("8 - 3 - 2", 3.0),
        pytest.param("2^3^2", 64.0, id="pow-left-assoc"),
        pytest.param("2 + 3 ^ 2 * 2", 20.0),
        pytest.param("1.5 * 2", 3.0),
        pytest.param("5. + 1", 6.0),
        pytest.param("1 2 + 3", 15.0, id="whitespace-ignored"),
        # negation
        pytest.param("5+-6", -1.0),
        pytest.param("-5+3", -2.0),
        pytest.param("5--6", 11.0),
        pytest.param("2^-1", 0.5),
        pytest.param("-2^2", 4.0, id="negation-binds-literal"),
        pytest.param("2*(-3)", -6.0),
        pytest.param("2*-(1+2)", -6.0),
        # modulo truncates and keeps the dividend's sign
        pytest.param("7%3", 1.0),
        pytest.param("-7%3", -1.0),
        pytest.param("7.9%3", 1.0),
        pytest.param("2+3%2", 3.0),
        # funcs
        pytest.param("1-sqrt(25)", -4.0),
        pytest.param("sqrt(sqrt(16))", 2.0),
        pytest.param("-sqrt(4)", -2.0),
        pytest.param("2*sqrt(9)+1", 7.0),
        pytest.param("sqrt(3*3+4*4)", 5.0),
        pytest.param("abs(-3)", 3.0),
        pytest.param("abs(2-5)*2", 6.0),
        pytest.param("round(2.5)", 3.0),
        pytest.param("round(2.4)", 2.0),
        pytest.param("round(-2.5)", -2.0),
        pytest.param("round(-2.7)", -2.0),
        pytest.param("log(1000)", 3.0),
        pytest.param("ln(E)", 1.0),
        pytest.param("rad2deg(PI)", 180.0),
        pytest.param("sin(0)", 0.0),
        pytest.param("cos(0)", 1.0),
        pytest.param("tan(0)", 0.0),
        pytest.param("asin(1)", math.pi / 2),
        pytest.param("acos(1)", 0.0),
        pytest.param("atan(1)*4", math.pi),
    ],
)
def test_eval_arithmetic(code: str, expected_ret_val: float) -> None:
    assert Expression(code).evaluate() == pytest.approx(expected_ret_val)


@pytest.mark.parametrize(
    "code, variables, expected_ret_val",
    [
        pytest.param("m * x + b", {"m": 2.0, "x": math.pi, "b": 2.555}, 2 * math.pi + 2.555),
        pytest.param("-x", {"x": 3.0}, -3.0),
        pytest.param("x_1 + _y", {"x_1": 1.0, "_y": 2.0}, 3.0),
        pytest.param("2*-x", {"x": 4}, -8.0),
        pytest.param("sqrt(x*x)", {"x": -3.0}, 3.0),
        pytest.param("E", {}, math.e),
        pytest.param("PI*r^2", {"r": 2.0}, math.pi * 4),
    ],
)
def test_eval_with_variables(code: str, variables: dict[str, float], expected_ret_val: float) -> None:
    assert Expression(code).evaluate(variables) == pytest.approx(expected_ret_val)


def test_predefined_constant_full_precision() -> None:
    assert Expression("PI+0").evaluate() == math.pi


def test_binding_shadows_predefined_constant() -> None:
    assert Expression("PI+0").evaluate({"PI": 1.0}) == 1.0


@pytest.mark.parametrize(
    "code, check",
    [
        pytest.param("1/0", lambda v: v == math.inf),
        pytest.param("-1/0", lambda v: v == -math.inf),
        pytest.param("0/0", math.isnan),
        pytest.param("5%0", math.isnan),
        pytest.param("10^400", lambda v: v == math.inf),
        pytest.param("(0-8)^(1/3)", math.isnan),
        pytest.param("sqrt(-1)", math.isnan),
        pytest.param("log(0)", lambda v: v == -math.inf),
        pytest.param("ln(0-1)", math.isnan),
        pytest.param("asin(2)", math.isnan),
        pytest.param("acos(-2)", math.isnan),
        pytest.param("round(1/0)", lambda v: v == math.inf),
    ],
)
def test_non_finite_results_propagate(code: str, check) -> None:
    assert check(Expression(code).evaluate())


@pytest.mark.parametrize("code", ["5+", "5*", "5+-", "(1+2)*"])
def test_dangling_operator_is_arity_error(code: str) -> None:
    expression = Expression(code)
    with pytest.raises(ArityError):
        expression.evaluate()


def test_runtime_evaluate_accepts_raw_text() -> None:
    assert evaluate(" 2 * ( x + 1 ) ", {"x": 2.0}) == 6.0


@pytest.mark.parametrize(
    "code, error_type",
    [
        pytest.param("", ArityError),
        pytest.param("(1)(2)", ArityError),
        pytest.param("5)", InternalError),
        pytest.param("(5", InternalError),
        pytest.param("5#", InternalError),
        pytest.param("sqrt", InternalError),
        pytest.param("sqrt(4", InternalError),
        pytest.param("1.2.3", InternalError),
    ],
)
def test_runtime_rejects_unvalidated_text(code: str, error_type: type) -> None:
    with pytest.raises(error_type):
        evaluate(code)


def test_unknown_function_is_internal_error() -> None:
    with pytest.raises(InternalError):
        eval_unary_function("exp", 1.0)
