"""Compile-time evaluation of require() arguments."""

import math
import re
from dataclasses import dataclass
from typing import Any, Final

from tree_sitter import Node as TSNode


class _Undefined:
    def __repr__(self) -> str:
        return "undefined"


UNDEFINED: Final = _Undefined()

_SIMPLE_ESCAPES: Final[dict[str, str]] = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "b": "\b",
    "f": "\f",
    "v": "\v",
    "0": "\0",
}
_ESCAPE = re.compile(
    r"\\(u\{[0-9a-fA-F]+\}|u[0-9a-fA-F]{4}|x[0-9a-fA-F]{2}|\r\n|[\s\S])"
)


@dataclass(frozen=True)
class Evaluation:
    confident: bool
    value: Any = None


NOT_CONFIDENT: Final[Evaluation] = Evaluation(confident=False)


def _unescape_match(match: re.Match[str]) -> str:
    escape = match.group(1)
    if escape.startswith("u{"):
        return chr(int(escape[2:-1], 16))
    if escape.startswith("u") and len(escape) == 5:
        return chr(int(escape[1:], 16))
    if escape.startswith("x") and len(escape) == 3:
        return chr(int(escape[1:], 16))
    if escape in {"\n", "\r", "\r\n", "\u2028", "\u2029"}:
        return ""
    return _SIMPLE_ESCAPES.get(escape, escape)


def unescape(raw: str) -> str:
    return _ESCAPE.sub(_unescape_match, raw)


def to_js_string(value: Any) -> str:
    if value is UNDEFINED:
        return "undefined"
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer():
            return str(int(value))
        return repr(value)
    return str(value)


def _number(text: str) -> float | None:
    cleaned = text.replace("_", "")
    try:
        if cleaned.lower().startswith(("0x", "0o", "0b")):
            return float(int(cleaned, 0))
        if cleaned.endswith("n"):
            return None
        return float(cleaned)
    except ValueError:
        return None


def _add(left: Any, right: Any) -> Any:
    if isinstance(left, str) or isinstance(right, str):
        return to_js_string(left) + to_js_string(right)
    if isinstance(left, float) and isinstance(right, float):
        return left + right
    return None


def evaluate(node: TSNode, source: bytes) -> Evaluation:
    """Statically evaluate an expression node.

    Only literals, template literals and `+` concatenation are understood.
    Anything else is reported as not confident.
    """
    kind = node.type
    text = source[node.start_byte : node.end_byte].decode("utf-8")

    if kind == "string":
        return Evaluation(True, unescape(text[1:-1]))
    if kind == "number":
        value = _number(text)
        return NOT_CONFIDENT if value is None else Evaluation(True, value)
    if kind == "true":
        return Evaluation(True, True)
    if kind == "false":
        return Evaluation(True, False)
    if kind == "null":
        return Evaluation(True, None)
    if kind == "undefined":
        return Evaluation(True, UNDEFINED)
    if kind == "parenthesized_expression":
        inner = [c for c in node.named_children if c.type != "comment"]
        if len(inner) != 1:
            return NOT_CONFIDENT
        return evaluate(inner[0], source)
    if kind == "template_string":
        return _evaluate_template(node, source)
    if kind == "binary_expression":
        operator = node.child_by_field_name("operator")
        left = node.child_by_field_name("left")
        right = node.child_by_field_name("right")
        if operator is None or operator.type != "+" or left is None or right is None:
            return NOT_CONFIDENT
        left_value = evaluate(left, source)
        right_value = evaluate(right, source)
        if not (left_value.confident and right_value.confident):
            return NOT_CONFIDENT
        result = _add(left_value.value, right_value.value)
        return NOT_CONFIDENT if result is None else Evaluation(True, result)
    return NOT_CONFIDENT


def _evaluate_template(node: TSNode, source: bytes) -> Evaluation:
    parts: list[str] = []
    # Children between the backticks, fragments are not always named
    cursor = node.start_byte + 1
    for child in node.children:
        if child.type != "template_substitution":
            continue
        parts.append(unescape(source[cursor : child.start_byte].decode("utf-8")))
        expressions = [c for c in child.named_children if c.type != "comment"]
        if len(expressions) != 1:
            return NOT_CONFIDENT
        value = evaluate(expressions[0], source)
        if not value.confident:
            return NOT_CONFIDENT
        parts.append(to_js_string(value.value))
        cursor = child.end_byte
    parts.append(unescape(source[cursor : node.end_byte - 1].decode("utf-8")))
    return Evaluation(True, "".join(parts))
