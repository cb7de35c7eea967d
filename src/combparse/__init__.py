"""
Library for building string parsers out of small composable functions.

See the objects for more explanations.

See the `combparse.general` module for general purpose parsers you can use as examples.

Defining parsers:
```
month = either("Jan", "Feb", "Mar")
day = take_between(1, 2, digit)
date = tokens(month, day, optional(","), digits, eof)
```

Using parsers:
```
result = date("Jan 12, 2022")
if result:
    ... # `result.value` is what matched, `result.residual` is what's left
else:
    ... # nothing was consumed, `result.residual` is the whole input
```

Parsers are plain functions: any callable taking a string and returning a `Result` can be
passed to the combinators.
"""

import combparse.const as const
import combparse.main
from combparse.main import (
    Result,
    Parser,
    FactoryParameter,
    parser_name,
    success,
    fail,
    eof,
    digit,
    letter,
    match,
    anycase,
    regex,
    optional,
    sequence,
    tokens,
    either,
    many0,
    many1,
    take_between,
    take,
    whitespace,
    any_of,
    any_except,
    separated_by,
    traced,
    digits,
    letters,
    alphanumeric,
    alphanumerics,
)
import combparse.general as general
