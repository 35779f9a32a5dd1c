"""Evaluate arithmetic typed into chat without touching a general code evaluator.

Chat text is untrusted, so expressions go through a small recursive-descent
parser that only knows numeric literals, ``+ - * /``, parentheses, and the
power operator (``^`` or ``**``). Anything else fails to parse and the caller
receives ``None``. Word math ("two plus three") is rewritten into the same
grammar first.
"""

from __future__ import annotations

import math
import re
from typing import Dict, List, Optional, Tuple

_MAX_EXPRESSION_LENGTH = 200

_LEADING_PROMPT = re.compile(r"^\s*(?:(?:what's|what|calculate|solve|compute|eval)\b\s*)?(?:is\b\s*)?", re.IGNORECASE)
_TRAILING_NOISE = re.compile(r"[\s?=!]+$")
_MATH_CHARS = re.compile(r"^[\d\s+\-*/().^%]+$")
_PERCENT_OF = re.compile(r"(\d+(?:\.\d+)?)\s*%\s*of\s*(\d+(?:\.\d+)?)", re.IGNORECASE)
_BARE_PERCENT = re.compile(r"(\d+(?:\.\d+)?)\s*%")
_TOKEN = re.compile(r"\s*(?:(\d+(?:\.\d*)?|\.\d+)|(\*\*|[-+*/()^]))")

NUMBER_WORDS: Dict[str, int] = {
    "zero": 0,
    "one": 1,
    "two": 2,
    "three": 3,
    "four": 4,
    "five": 5,
    "six": 6,
    "seven": 7,
    "eight": 8,
    "nine": 9,
    "ten": 10,
    "eleven": 11,
    "twelve": 12,
    "thirteen": 13,
    "fourteen": 14,
    "fifteen": 15,
    "sixteen": 16,
    "seventeen": 17,
    "eighteen": 18,
    "nineteen": 19,
    "twenty": 20,
    "thirty": 30,
    "forty": 40,
    "fifty": 50,
    "sixty": 60,
    "seventy": 70,
    "eighty": 80,
    "ninety": 90,
}
MAGNITUDE_WORDS: Dict[str, int] = {"hundred": 100, "thousand": 1000}

# Longer phrases first so "raised to the power of" never leaves stray "to the".
OPERATOR_WORDS: List[Tuple[str, str]] = [
    ("raised to the power of", " ** "),
    ("raised to the power", " ** "),
    ("to the power of", " ** "),
    ("to the power", " ** "),
    ("raised to", " ** "),
    ("multiplied by", " * "),
    ("divided by", " / "),
    ("to the", " ** "),
    ("plus", " + "),
    ("add", " + "),
    ("added", " + "),
    ("and", " + "),
    ("minus", " - "),
    ("subtract", " - "),
    ("less", " - "),
    ("times", " * "),
    ("multiply", " * "),
    ("multiplied", " * "),
    ("into", " * "),
    ("divided", " / "),
    ("divide", " / "),
    ("over", " / "),
    ("power", " ** "),
    ("raised", " ** "),
    ("squared", " **2 "),
    ("square", " **2 "),
    ("cubed", " **3 "),
    ("cube", " **3 "),
]
_FILLER_WORDS = re.compile(r"\b(?:what is|what's|calculate|equals|equal|the|of|by|is)\b", re.IGNORECASE)
_NON_ARITHMETIC = re.compile(r"[^\d+\-*/().\s]")
_NUMBER_LITERAL = re.compile(r"\d+(?:\.\d+)?")

_NUMBER_WORD_PATTERN = re.compile(
    r"\b(?:" + "|".join(sorted(list(NUMBER_WORDS) + list(MAGNITUDE_WORDS), key=len, reverse=True)) + r")\b"
)
_NUMBER_RUN_PATTERN = re.compile(
    r"\b(?:{words})(?:(?:\s+|-)(?:{words}))*\b".format(
        words="|".join(sorted(list(NUMBER_WORDS) + list(MAGNITUDE_WORDS), key=len, reverse=True))
    )
)
_OPERATOR_PATTERNS = [(re.compile(rf"\b{re.escape(word)}\b"), symbol) for word, symbol in OPERATOR_WORDS]


class _ParseError(ValueError):
    """Raised internally when the token stream is not valid arithmetic."""


def evaluate(text: str) -> Optional[float]:
    """Return the value of the arithmetic in ``text`` rounded to 4 decimals.

    ``None`` means the text is not arithmetic (or could not be evaluated).
    """

    expression = extract_expression(text)
    if expression is None:
        return None
    try:
        value = _Parser(expression).parse()
    except (ValueError, ArithmeticError, RecursionError):
        return None
    if isinstance(value, complex) or not isinstance(value, float) or not math.isfinite(value):
        return None
    rounded = round(value, 4)
    return 0.0 if rounded == 0 else rounded


def extract_expression(text: str) -> Optional[str]:
    """Normalize ``text`` into the evaluator grammar, or ``None`` when it is not math."""

    if not text or len(text) > _MAX_EXPRESSION_LENGTH:
        return None
    cleaned = _TRAILING_NOISE.sub("", text.strip())
    candidate = _normalize_percentages(_LEADING_PROMPT.sub("", cleaned, count=1).strip())
    if candidate and _MATH_CHARS.match(candidate) and re.search(r"\d", candidate):
        return candidate.replace("^", "**")

    rewritten = parse_word_math(cleaned)
    if rewritten is None:
        return None
    return rewritten.replace("^", "**")


def parse_word_math(text: str) -> Optional[str]:
    """Rewrite phrases like "two plus three" into "2 + 3".

    Requires at least one number (word or digit) and one operator word.
    """

    if not text:
        return None
    lowered = text.lower()
    has_number = bool(re.search(r"\d", lowered) or _NUMBER_WORD_PATTERN.search(lowered))
    has_operator = any(pattern.search(lowered) for pattern, _ in _OPERATOR_PATTERNS)
    if not has_number or not has_operator:
        return None

    # "twenty-five" is one number; a spaced " - " stays subtraction.
    expression = _NUMBER_RUN_PATTERN.sub(
        lambda match: str(_words_to_number(re.split(r"\s+|-", match.group(0)))), lowered
    )
    for pattern, symbol in _OPERATOR_PATTERNS:
        expression = pattern.sub(symbol, expression)
    expression = _FILLER_WORDS.sub(" ", expression)
    expression = _NON_ARITHMETIC.sub("", expression)
    expression = " ".join(expression.split())
    # Operands on both sides; "add one" alone is not arithmetic.
    if len(_NUMBER_LITERAL.findall(expression)) < 2:
        return None
    return expression


def format_number(value: float) -> str:
    """Render integral floats without a trailing ``.0``."""

    if float(value).is_integer():
        return str(int(value))
    return f"{value:.4f}".rstrip("0").rstrip(".")


def _normalize_percentages(expression: str) -> str:
    expression = _PERCENT_OF.sub(r"(\1/100)*\2", expression)
    return _BARE_PERCENT.sub(r"(\1/100)", expression)


def _words_to_number(words: List[str]) -> int:
    total = 0
    current = 0
    for word in words:
        if word in MAGNITUDE_WORDS:
            magnitude = MAGNITUDE_WORDS[word]
            current = max(current, 1) * magnitude
            if magnitude >= 1000:
                total += current
                current = 0
        else:
            current += NUMBER_WORDS[word]
    return total + current


class _Parser:
    """Recursive-descent parser over ``+ - * / ( ) ** ^`` and numbers.

    Grammar::

        expr    := term (("+" | "-") term)*
        term    := unary (("*" | "/") unary)*
        unary   := ("+" | "-") unary | power
        power   := primary (("**" | "^") unary)?
        primary := NUMBER | "(" expr ")"
    """

    def __init__(self, expression: str) -> None:
        self._tokens = _tokenize(expression)
        self._index = 0

    def parse(self) -> float:
        if not self._tokens:
            raise _ParseError("empty expression")
        value = self._expr()
        if self._index != len(self._tokens):
            raise _ParseError(f"unexpected token {self._tokens[self._index][1]!r}")
        return value

    def _peek(self) -> Optional[Tuple[str, str]]:
        if self._index < len(self._tokens):
            return self._tokens[self._index]
        return None

    def _take(self) -> Tuple[str, str]:
        token = self._peek()
        if token is None:
            raise _ParseError("unexpected end of expression")
        self._index += 1
        return token

    def _accept(self, *operators: str) -> Optional[str]:
        token = self._peek()
        if token and token[0] == "op" and token[1] in operators:
            self._index += 1
            return token[1]
        return None

    def _expr(self) -> float:
        value = self._term()
        while True:
            operator = self._accept("+", "-")
            if operator is None:
                return value
            right = self._term()
            value = value + right if operator == "+" else value - right

    def _term(self) -> float:
        value = self._unary()
        while True:
            operator = self._accept("*", "/")
            if operator is None:
                return value
            right = self._unary()
            value = value * right if operator == "*" else value / right

    def _unary(self) -> float:
        operator = self._accept("+", "-")
        if operator == "-":
            return -self._unary()
        if operator == "+":
            return self._unary()
        return self._power()

    def _power(self) -> float:
        base = self._primary()
        if self._accept("**", "^"):
            exponent = self._unary()
            return math.pow(base, exponent)
        return base

    def _primary(self) -> float:
        kind, value = self._take()
        if kind == "num":
            return float(value)
        if value == "(":
            inner = self._expr()
            if self._accept(")") is None:
                raise _ParseError("missing closing parenthesis")
            return inner
        raise _ParseError(f"unexpected token {value!r}")


def _tokenize(expression: str) -> List[Tuple[str, str]]:
    tokens: List[Tuple[str, str]] = []
    position = 0
    length = len(expression)
    while position < length:
        if expression[position].isspace():
            position += 1
            continue
        match = _TOKEN.match(expression, position)
        if not match or match.end() == position:
            raise _ParseError(f"invalid character {expression[position]!r}")
        number, operator = match.groups()
        tokens.append(("num", number) if number is not None else ("op", operator))
        position = match.end()
    return tokens


__all__ = ["evaluate", "extract_expression", "parse_word_math", "format_number", "NUMBER_WORDS", "OPERATOR_WORDS"]
