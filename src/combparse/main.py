"""
The implementations of the result type, the primitive parsers and the combinators.
"""

from __future__ import annotations
from typing import Any, Final, Protocol, Self, TypeVar
from collections.abc import Callable, Iterable, Container
from contextvars import ContextVar
import logging
import re

import combparse.const as const


log = logging.getLogger("combparse")

_ParserT = TypeVar("_ParserT", bound=Callable[..., Any])

_checking_progress: ContextVar[bool] = ContextVar("_checking_progress", default=False)
"""Set while a repetition factory tries its parser on the empty string. `traced()` stays quiet then."""



class Result:
    """
    The outcome of running a parser.

    ```
    r = parser("some input")
    if r:
        r.value     # the consumed prefix of the input
        r.residual  # what's left to parse
    else:
        r.residual  # the input, untouched
    ```

    On success, `value + residual` is always the exact input the parser was given.

    On failure, `value` is empty and `residual` is the input, untouched.

    Results are immutable: setting or deleting an attribute raises `AttributeError`.
    """
    __slots__ = ("success", "value", "residual")

    success: bool
    """Whether the parser matched."""
    value: str
    """The consumed part of the input. Always empty on failure."""
    residual: str
    """The part of the input that wasn't consumed."""

    def __init__(self, success: bool, value: str, residual: str) -> None:
        object.__setattr__(self, "success", success)
        object.__setattr__(self, "value", value)
        object.__setattr__(self, "residual", residual)

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError(f"Result is immutable, can't set {name!r}.")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"Result is immutable, can't delete {name!r}.")

    @classmethod
    def matched(cls, value: str, residual: str) -> Self:
        """A successful result."""
        return cls(True, value, residual)

    @classmethod
    def failed(cls, src: str) -> Self:
        """A failed result that consumed nothing from `src`."""
        return cls(False, "", src)

    def __bool__(self) -> bool:
        return self.success

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Result):
            return NotImplemented
        return (self.success, self.value, self.residual) == (other.success, other.value, other.residual)

    def __hash__(self) -> int:
        return hash((self.success, self.value, self.residual))

    def __repr__(self) -> str:
        return f"Result({self.success!r}, {self.value!r}, {self.residual!r})"


class Parser(Protocol):
    """
    A protocol for parsers.

    A parser takes the input string and returns a `Result`. Parsers hold no state,
    so calling the same parser on the same input always gives an equal result.
    """
    def __call__(self, src: str) -> Result: ...

FactoryParameter = Parser | str | re.Pattern
"""Anything a combinator accepts in place of a parser. Strings become `match()`, patterns become `regex()`."""

def convert_factory_parameter(parser: FactoryParameter) -> Parser:
    if isinstance(parser, str):
        return match(parser)
    elif isinstance(parser, re.Pattern):
        return regex(parser)
    elif callable(parser):
        return parser
    else:
        raise TypeError(f"Expected a parser, a string or a compiled pattern, got {type(parser).__name__}.")

def convert_factory_parameters(parsers: Iterable[FactoryParameter]) -> tuple[Parser, ...]:
    return tuple(convert_factory_parameter(parser) for parser in parsers)

def parser_name(parser: Parser) -> str:
    """The name used for a parser in debug logs and error messages."""
    return getattr(parser, "__name__", repr(parser))

def _named(name: str) -> Callable[[_ParserT], _ParserT]:
    def decorator(f: _ParserT) -> _ParserT:
        f.__name__ = name
        f.__qualname__ = name
        return f
    return decorator

def _run_length(src: str, chars: Container[str], inside: bool = True) -> int:
    """Length of the leading run of characters that are in `chars` (or, with `inside=False`, that aren't)."""
    for i, c in enumerate(src):
        if (c in chars) != inside:
            return i
    return len(src)

def _check_progress(parser: Parser, factory: str) -> None:
    """
    Rejects parsers that can succeed without consuming anything.

    A parser that matches the empty string would make a repetition loop forever.
    """
    token = _checking_progress.set(True)
    try:
        matches_empty = bool(parser(""))
    finally:
        _checking_progress.reset(token)
    if matches_empty:
        raise ValueError(
            f"{factory}() requires a parser that consumes input whenever it succeeds, "
            f"but {parser_name(parser)} matches the empty string."
        )



def success(src: str) -> Result:
    """A pre-defined parser (not a factory) that always succeeds without consuming anything."""
    return Result.matched("", src)

def fail(src: str) -> Result:
    """A pre-defined parser (not a factory) that always fails."""
    return Result.failed(src)

def eof(src: str) -> Result:
    """A pre-defined parser (not a factory) that succeeds only at the end of the input."""
    if src:
        return Result.failed(src)
    return Result.matched("", "")

def digit(src: str) -> Result:
    """A pre-defined parser (not a factory) for a single ASCII decimal digit."""
    if src[:1] in const.DECIMAL:
        return Result.matched(src[0], src[1:])
    return Result.failed(src)

def letter(src: str) -> Result:
    """A pre-defined parser (not a factory) for a single ASCII letter."""
    if src[:1] in const.ALPHABETIC:
        return Result.matched(src[0], src[1:])
    return Result.failed(src)

def match(target: str) -> Parser:
    """
    Parser factory.

    Matches the given string at the start of the input. Case sensitive.
    """
    @_named(f"match({target!r})")
    def inner(src: str) -> Result:
        if src.startswith(target):
            return Result.matched(target, src[len(target):])
        return Result.failed(src)
    return inner

def anycase(target: str) -> Parser:
    """
    Parser factory.

    Matches the given string at the start of the input. Not case sensitive.

    The value is the text as it appears in the input, not the target.
    """
    lowered = target.lower()
    @_named(f"anycase({target!r})")
    def inner(src: str) -> Result:
        head = src[:len(target)]
        if head.lower() == lowered:
            return Result.matched(head, src[len(head):])
        return Result.failed(src)
    return inner

def regex(pattern: str | re.Pattern, flags: int | re.RegexFlag = 0) -> Parser:
    """
    Parser factory.

    Matches the regex at the start of the input.
    """
    compiled = re.compile(pattern, flags)
    @_named(f"regex({compiled.pattern!r})")
    def inner(src: str) -> Result:
        m = compiled.match(src)
        if m is None:
            return Result.failed(src)
        return Result.matched(m.group(), src[m.end():])
    return inner

def optional(target: FactoryParameter) -> Parser:
    """
    Parser factory.

    Matches `target` if it can, otherwise succeeds without consuming anything. Never fails.

    Same as `either(target, success)`.
    """
    return either(target, success)



def sequence(*parsers: FactoryParameter) -> Parser:
    """
    Parser factory.

    All the given parsers must match in order, each one starting where the previous one stopped.

    The value is everything they matched. If any of them fails, the whole sequence fails
    and nothing is consumed.
    """
    if len(parsers) <= 0:
        raise ValueError("At least one parser required.")
    new_parsers = convert_factory_parameters(parsers)
    @_named("sequence(" + ", ".join(parser_name(p) for p in new_parsers) + ")")
    def inner(src: str) -> Result:
        matched: list[str] = []
        residual = src
        for parser in new_parsers:
            result = parser(residual)
            if not result:
                return Result.failed(src)
            matched.append(result.value)
            residual = result.residual
        return Result.matched("".join(matched), residual)
    return inner

def tokens(*parsers: FactoryParameter) -> Parser:
    """
    Parser factory.

    Same as `sequence()`, but each parser is wrapped in `whitespace()`, so any amount
    of whitespace is allowed before, between and after them.
    """
    if len(parsers) <= 0:
        raise ValueError("At least one parser required.")
    return sequence(*(whitespace(parser) for parser in parsers))

def either(*parsers: FactoryParameter) -> Parser:
    """
    Parser factory.

    Tries the parsers in order against the same input and returns the result of the first
    one that matches. If none match, returns the failure of the last one.

    The choice is final: if something after `either()` fails, the other alternatives are not retried.
    """
    if len(parsers) <= 0:
        raise ValueError("At least one parser required.")
    new_parsers = convert_factory_parameters(parsers)
    @_named("either(" + ", ".join(parser_name(p) for p in new_parsers) + ")")
    def inner(src: str) -> Result:
        for parser in new_parsers:
            result = parser(src)
            if result:
                return result
        return result
    return inner



def many0(parser: FactoryParameter) -> Parser:
    """
    Parser factory.

    Repeatedly matches the given parser until it fails. Always succeeds.

    The parser must consume input whenever it succeeds. Parsers that match the
    empty string (like `success` or `optional(...)`) are rejected with a `ValueError`.
    """
    new_parser = convert_factory_parameter(parser)
    _check_progress(new_parser, "many0")
    @_named(f"many0({parser_name(new_parser)})")
    def inner(src: str) -> Result:
        matched, residual = _repeat(new_parser, src)
        return Result.matched("".join(matched), residual)
    return inner

def many1(parser: FactoryParameter) -> Parser:
    """
    Parser factory.

    Same as `many0()`, but fails if the parser didn't match at least once.
    """
    new_parser = convert_factory_parameter(parser)
    _check_progress(new_parser, "many1")
    @_named(f"many1({parser_name(new_parser)})")
    def inner(src: str) -> Result:
        matched, residual = _repeat(new_parser, src)
        if not matched:
            return Result.failed(src)
        return Result.matched("".join(matched), residual)
    return inner

def _repeat(parser: Parser, src: str) -> tuple[list[str], str]:
    matched: list[str] = []
    residual = src
    while True:
        result = parser(residual)
        # a zero-width match would repeat forever
        if not result or not result.value:
            return matched, residual
        matched.append(result.value)
        residual = result.residual

def take_between(minimum: int, maximum: int, parser: FactoryParameter) -> Parser:
    """
    Parser factory.

    Matches the parser at most `maximum` times, stopping early at the first failure.
    Succeeds if it matched at least `minimum` times.

    If `maximum` is less than `minimum`, the returned parser always fails.
    A negative `minimum` works like 0.
    """
    new_parser = convert_factory_parameter(parser)
    name = f"take_between({minimum}, {maximum}, {parser_name(new_parser)})"
    if maximum < minimum:
        log.debug("%s can never match: the maximum is less than the minimum.", name)
        @_named(name)
        def never(src: str) -> Result:
            return Result.failed(src)
        return never
    @_named(name)
    def inner(src: str) -> Result:
        matched: list[str] = []
        residual = src
        count = 0
        while count < maximum:
            result = new_parser(residual)
            if not result:
                break
            if not result.value:
                # parsers are pure, so the same zero-width match repeats up to the maximum
                count = maximum
                break
            matched.append(result.value)
            residual = result.residual
            count += 1
        if count < minimum:
            return Result.failed(src)
        return Result.matched("".join(matched), residual)
    return inner

def take(amount: int, parser: FactoryParameter) -> Parser:
    """
    Parser factory.

    Matches the parser exactly `amount` times. Same as `take_between(amount, amount, parser)`.
    """
    return take_between(amount, amount, parser)



def whitespace(parser: FactoryParameter) -> Parser:
    """
    Parser factory.

    Skips any whitespace before the parser, and if it matches, any whitespace after it.
    The skipped whitespace is part of the value.

    If the parser fails, nothing is consumed, not even the leading whitespace.
    """
    new_parser = convert_factory_parameter(parser)
    @_named(f"whitespace({parser_name(new_parser)})")
    def inner(src: str) -> Result:
        leading = src[:_run_length(src, const.WHITESPACES)]
        result = new_parser(src[len(leading):])
        if not result:
            return Result.failed(src)
        trailing = result.residual[:_run_length(result.residual, const.WHITESPACES)]
        return Result.matched(leading + result.value + trailing, result.residual[len(trailing):])
    return inner



def _charset_parser(factory: str, charset: Iterable[str], inside: bool) -> Parser:
    chars = frozenset(charset)
    @_named(f"{factory}({''.join(sorted(chars))!r})")
    def inner(src: str) -> Result:
        length = _run_length(src, chars, inside)
        if length <= 0:
            return Result.failed(src)
        return Result.matched(src[:length], src[length:])
    return inner

def any_of(charset: Iterable[str]) -> Parser:
    """
    Parser factory.

    Keeps matching characters that are in `charset`, stopping at the first one that isn't.
    Fails if no characters matched.

    ```
    parser = any_of("aeiou")
    parser("audio").value       # "au"
    parser("audio").residual    # "dio"
    ```
    """
    return _charset_parser("any_of", charset, True)

def any_except(charset: Iterable[str]) -> Parser:
    """
    Parser factory.

    Keeps matching characters that are not in `charset`, stopping at the first one that is.
    Fails if no characters matched.

    ```
    parser = any_except("aeiou")
    parser("snow").value        # "sn"
    parser("snow").residual     # "ow"
    ```
    """
    return _charset_parser("any_except", charset, False)

def separated_by(separator: FactoryParameter, element: FactoryParameter) -> Parser:
    """
    Parser factory.

    Matches one or more elements with a separator between each pair. A separator
    that isn't followed by an element is left unconsumed.

    ```
    parser = sequence("[", separated_by(",", digits), "]")
    parser("[1,22,333]").success    # True
    ```
    """
    new_separator = convert_factory_parameter(separator)
    new_element = convert_factory_parameter(element)
    _check_progress(sequence(new_separator, new_element), "separated_by")
    @_named(f"separated_by({parser_name(new_separator)}, {parser_name(new_element)})")
    def inner(src: str) -> Result:
        first = new_element(src)
        if not first:
            return Result.failed(src)
        matched: list[str] = [first.value]
        residual = first.residual
        while True:
            sep = new_separator(residual)
            if not sep:
                break
            item = new_element(sep.residual)
            if not item or not (sep.value or item.value):
                break
            matched.append(sep.value)
            matched.append(item.value)
            residual = item.residual
        return Result.matched("".join(matched), residual)
    return inner



def traced(parser: FactoryParameter, name: str | None = None) -> Parser:
    """
    Parser factory.

    Logs every call of the parser on the `combparse` logger at DEBUG level. The result is passed through unchanged.

    Calls made by `many0()`, `many1()` and `separated_by()` while checking the parser at construction aren't logged.

    ```
    import logging
    logging.basicConfig(level=logging.DEBUG)
    date = traced(tokens(month, day, year), "date")
    ```
    """
    new_parser = convert_factory_parameter(parser)
    label = parser_name(new_parser) if name is None else name
    @_named(label)
    def inner(src: str) -> Result:
        if _checking_progress.get():
            return new_parser(src)
        log.debug("trying %s on %r", label, src)
        result = new_parser(src)
        if result:
            log.debug("%s matched %r, residual %r", label, result.value, result.residual)
        else:
            log.debug("%s failed", label)
        return result
    return inner



digits: Final[Parser] = many1(digit)
letters: Final[Parser] = many1(letter)
alphanumeric: Final[Parser] = either(digit, letter)
alphanumerics: Final[Parser] = many1(alphanumeric)
