from __future__ import annotations

from combparse import *

# dates

month = either(*const.MONTHS)
"""Three letter English month name, capitalized."""

day = take_between(1, 2, digit)

# The four digit form goes first: `either()` never comes back to try the
# other alternative, and `take(2, digit)` would stop halfway through "2022".
year = either(take(4, digit), take(2, digit))

date = tokens(month, day, optional(","), year, eof)
"""
Dates like `Jan 12, 2022`, `Oct 2, 22` or `Aug 8 2022`.

Must span the whole input.
"""

# numbers and names

integer = sequence(optional("-"), digits)
"""Decimal integer with an optional leading minus sign."""

identifier = sequence(either(letter, "_"), optional(any_of(const.ALNUM | {"_"})))
"""A letter or underscore, followed by any number of letters, digits and underscores."""

# lists

number_list = tokens("[", separated_by(tokens(","), digits), "]")
"""
Bracketed comma separated list of numbers, like `[1, 2, 3]`.

Whitespace is allowed anywhere between the items.
"""
