from dataclasses import dataclass
from typing import Optional

from exprcalc.lexical import (
    DIGITS,
    clean_text,
    ends_operand,
    is_binary_operator,
    is_identifier_start,
    is_unary_function_name,
    is_valid_identifier,
    is_valid_numeric_literal,
    scan_number,
    scan_word,
)


class ConstructionError(Exception):
    pass


@dataclass
class InvalidSyntaxError(ConstructionError):
    errmsg: str
    code: str
    error_char_idx: int

    def __str__(self) -> str:
        print_start_idx = max(0, self.error_char_idx - 10)
        print_ellipsis_pre = print_start_idx > 0
        print_end_idx = min(len(self.code), self.error_char_idx + 10)
        print_ellipsis_post = print_end_idx < len(self.code)
        return "\n".join(
            [
                f"[Syntax error] {self.errmsg}",
                (
                    ("..." if print_ellipsis_pre else "")
                    + f"{self.code[print_start_idx:print_end_idx]}"
                    + ("..." if print_ellipsis_post else "")
                ),
                " " * (self.error_char_idx - print_start_idx + (3 if print_ellipsis_pre else 0)) + "^",
            ]
        )


@dataclass
class SyntaxIssue:
    errmsg: str
    error_char_idx: int


def validate(text: str) -> bool:
    return find_syntax_error(text) is None


def find_syntax_error(text: str) -> Optional[SyntaxIssue]:
    """Scans the whitespace-stripped text once and reports the first structural problem.

    Indices in the returned issue refer to the stripped text. No arithmetic is done here:
    an accepted text can still fail at evaluation (undefined variable, dangling operator).
    """
    tokens = clean_text(text)
    if not tokens:
        return SyntaxIssue("Empty expression", 0)

    open_count = close_count = 0
    i = 0
    while i < len(tokens):
        ch = tokens[i]
        prev = tokens[i - 1] if i > 0 else ""

        if ch == "(":
            if prev == ")":
                return SyntaxIssue("Implicit multiplication is not supported", i)
            if prev and ends_operand(prev):
                return SyntaxIssue("Only functions can be called", i)
            open_count += 1
            i += 1

        elif ch == ")":
            close_count += 1
            if close_count > open_count:
                return SyntaxIssue("Unmatched closing parenthesis", i)
            if not ends_operand(prev):
                return SyntaxIssue("Operand expected before closing parenthesis", i)
            i += 1

        # minus doubles as negation: "-x", "(-x", "5+-x", but never three symbols in a row
        elif ch == "-":
            if i > 0 and not ends_operand(prev) and prev != "(":
                if not (is_binary_operator(prev) and i >= 2 and ends_operand(tokens[i - 2])):
                    return SyntaxIssue("Unexpected '-'", i)
            i += 1

        elif is_binary_operator(ch):
            if i == 0:
                return SyntaxIssue("Expression cannot start with an operator", i)
            if not ends_operand(prev):
                return SyntaxIssue(f"Operand expected before {ch!r}", i)
            i += 1

        elif ch in DIGITS:
            if prev == ")":
                return SyntaxIssue("Implicit multiplication is not supported", i)
            end = scan_number(tokens, i)
            if not is_valid_numeric_literal(tokens[i:end]):
                return SyntaxIssue(f"Invalid number {tokens[i:end]!r}", i)
            if end < len(tokens) and is_identifier_start(tokens[end]):
                return SyntaxIssue("Operator expected between number and name", end)
            i = end

        elif is_identifier_start(ch):
            if prev == ")":
                return SyntaxIssue("Implicit multiplication is not supported", i)
            end = scan_word(tokens, i)
            word = tokens[i:end]
            if is_unary_function_name(word):
                if end >= len(tokens) or tokens[end] != "(":
                    return SyntaxIssue(f"Function {word!r} must be followed by '('", end)
                # the call's own parenthesis
                open_count += 1
                i = end + 1
            elif not is_valid_identifier(word):
                return SyntaxIssue(f"Invalid name {word!r}", i)
            else:
                i = end

        else:
            return SyntaxIssue(f"Unexpected character: {ch!r}", i)

    if open_count != close_count:
        return SyntaxIssue("Unclosed parenthesis", len(tokens))

    return None
