import logging
from dataclasses import dataclass
from typing import Iterator, Mapping, Optional

from exprcalc.builtins import PREDEFINED_CONSTANTS
from exprcalc.lexical import clean_text, is_unary_function_name, iter_words
from exprcalc.runtime import EvalError, evaluate
from exprcalc.validator import InvalidSyntaxError, find_syntax_error

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EvalOutcome:
    value: float
    error: Optional[EvalError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def message(self) -> str:
        return "" if self.error is None else str(self.error)


@dataclass(frozen=True)
class Expression:
    """A validated, whitespace-free formula.

    Construction raises InvalidSyntaxError for structurally broken text, so an existing
    instance can only fail at evaluation time, e.g. on a variable missing from the binding.
    """

    text: str

    def __post_init__(self) -> None:
        code = clean_text(self.text)
        issue = find_syntax_error(code)
        if issue is not None:
            logger.debug("Rejected expression %r: %s", self.text, issue.errmsg)
            raise InvalidSyntaxError(issue.errmsg, code=code, error_char_idx=issue.error_char_idx)
        object.__setattr__(self, "text", code)

    def __str__(self) -> str:
        return self.text

    def evaluate(self, binding: Optional[Mapping[str, float]] = None) -> float:
        return evaluate(self.text, binding)

    def try_evaluate(self, binding: Optional[Mapping[str, float]] = None) -> EvalOutcome:
        try:
            return EvalOutcome(value=self.evaluate(binding))
        except EvalError as e:
            return EvalOutcome(value=0.0, error=e)

    def variables(self) -> Iterator[str]:
        seen: set[str] = set()
        for word in iter_words(self.text):
            if word in seen or word in PREDEFINED_CONSTANTS or is_unary_function_name(word):
                continue
            seen.add(word)
            yield word
