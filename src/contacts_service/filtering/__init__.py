"""Name pattern compilation and the streaming exclusion filter."""

from .pattern import CompileResult, NameMatcher, PatternCompiler, compile_pattern
from .pipeline import filter_excluding, filter_excluding_sync

__all__ = [
    "CompileResult",
    "NameMatcher",
    "PatternCompiler",
    "compile_pattern",
    "filter_excluding",
    "filter_excluding_sync",
]
