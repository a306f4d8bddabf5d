"""Name filter compilation.

``compile_pattern`` turns the user-supplied ``nameFilter`` into a reusable
:class:`NameMatcher`. An invalid expression comes back as a
:class:`~contacts_service.core.errors.PatternError` value, so callers branch
on the result instead of catching ``re.error``.
"""

from __future__ import annotations

import re
from typing import Callable, Union

from contacts_service.core.errors import PatternError


class NameMatcher:
    """A compiled name filter with partial-match (search) semantics."""

    __slots__ = ("_regex",)

    def __init__(self, regex: re.Pattern[str]) -> None:
        self._regex = regex

    @property
    def pattern(self) -> str:
        return self._regex.pattern

    def matches(self, name: str) -> bool:
        """True if the pattern matches anywhere within *name*."""
        return self._regex.search(name) is not None

    def __repr__(self) -> str:
        return f"NameMatcher({self.pattern!r})"


CompileResult = Union[NameMatcher, PatternError]
PatternCompiler = Callable[[str], CompileResult]


def compile_pattern(pattern: str) -> CompileResult:
    """Compile *pattern* into a matcher.

    Pure and side-effect free; safe to call before any stream is opened.

    Returns:
        A :class:`NameMatcher`, or a :class:`PatternError` carrying the
        ``re`` diagnostic when *pattern* is not a valid expression.
    """
    try:
        regex = re.compile(pattern)
    except (re.error, OverflowError) as exc:
        return PatternError(pattern, str(exc))
    return NameMatcher(regex)
