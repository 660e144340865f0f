import enum
import string
from typing import Iterator

LETTERS = frozenset(string.ascii_letters)
DIGITS = frozenset(string.digits)

UNARY_FUNCTION_NAMES = frozenset(
    ["sqrt", "round", "abs", "sin", "cos", "tan", "asin", "acos", "atan", "rad2deg", "log", "ln"]
)


class PrintableEnum(enum.Enum):
    def __str__(self) -> str:
        return self.name

    __repr__ = __str__


class BinaryOperator(PrintableEnum):
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    POW = "^"
    MOD = "%"

    @property
    def symbol(self) -> str:
        return self.value

    @property
    def precedence(self) -> int:
        return _PRECEDENCE[self]


_PRECEDENCE = {
    BinaryOperator.ADD: 1,
    BinaryOperator.SUB: 1,
    BinaryOperator.MUL: 2,
    BinaryOperator.DIV: 2,
    BinaryOperator.MOD: 2,
    BinaryOperator.POW: 3,
}


def is_binary_operator(ch: str) -> bool:
    return len(ch) == 1 and ch in "+-*/^%"


def is_unary_function_name(name: str) -> bool:
    return name in UNARY_FUNCTION_NAMES


def is_identifier_start(ch: str) -> bool:
    return ch in LETTERS or ch == "_"


def _is_valid_in_identifier(ch: str) -> bool:
    return ch in LETTERS or ch in DIGITS or ch == "_"


def _is_valid_in_number(ch: str) -> bool:
    return ch in DIGITS or ch == "."


def ends_operand(ch: str) -> bool:
    """True for characters an operand (or a closed group) can end on."""
    return _is_valid_in_identifier(ch) or ch == "." or ch == ")"


def is_valid_identifier(name: str) -> bool:
    if not name or not is_identifier_start(name[0]):
        return False
    if not all(_is_valid_in_identifier(ch) for ch in name[1:]):
        return False
    # function names are reserved
    return not is_unary_function_name(name)


def is_valid_numeric_literal(text: str) -> bool:
    return bool(text) and all(_is_valid_in_number(ch) for ch in text) and text.count(".") <= 1


def clean_text(text: str) -> str:
    return "".join(text.split())


def scan_number(text: str, i: int) -> int:
    """Returns the index one past the run of digits and dots starting at ``i``"""
    end = i
    while end < len(text) and _is_valid_in_number(text[end]):
        end += 1
    return end


def scan_word(text: str, i: int) -> int:
    end = i
    while end < len(text) and _is_valid_in_identifier(text[end]):
        end += 1
    return end


def iter_words(text: str) -> Iterator[str]:
    i = 0
    while i < len(text):
        if is_identifier_start(text[i]):
            end = scan_word(text, i)
            yield text[i:end]
            i = end
        elif text[i] in DIGITS:
            i = scan_number(text, i)
        else:
            i += 1
