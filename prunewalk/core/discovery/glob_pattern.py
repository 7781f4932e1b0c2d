# prunewalk/core/discovery/glob_pattern.py
"""
Glob dialect used for include and exclude matching.

Patterns are anchored at the traversal root and tested against normalized,
forward-slash path strings (directories carry a trailing slash):

- ``*`` matches any run of characters except ``/``
- ``?`` matches a single character except ``/``
- ``[...]`` matches one character of a class, ``[!...]`` or ``[^...]`` negates
- ``**`` as a whole segment matches zero or more whole segments, so
  ``**/*.c`` also matches ``a.c`` and ``a/**`` matches the directory ``a/``
- a backslash escapes the next character

Brace alternation is not part of the dialect. ``{c,cpp}`` groups are expanded
into one pattern per alternative when a pattern set is compiled, and the
expanded patterns are what reach the matcher.
"""
import re
from functools import lru_cache
from typing import Iterable, List, Optional, Sequence, Tuple

import pathspec
import structlog

from prunewalk.exceptions import PatternError

log = structlog.get_logger(__name__)

_ANY_RUN = "[^/]*"
_ANY_ONE = "[^/]"
# a segment made only of stars never matches an empty segment.
_WHOLE_SEGMENT = "[^/]+"
# globstars span any character, newlines included.
_GLOBSTAR_PREFIX = r"(?:[\s\S]*/)?"
_GLOBSTAR_TAIL = r"[\s\S]*"


def _split_alternatives(body: str) -> List[str]:
    # splits a brace body on commas that are not nested or escaped.
    parts: List[str] = []
    depth = 0
    start = 0
    i = 0
    while i < len(body):
        ch = body[i]
        if ch == "\\":
            i += 2
            continue
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
        elif ch == "," and depth == 0:
            parts.append(body[start:i])
            start = i + 1
        i += 1
    parts.append(body[start:])
    return parts


def _expand(pattern: str, original: str) -> List[str]:
    group_start: Optional[int] = None
    depth = 0
    i = 0
    while i < len(pattern):
        ch = pattern[i]
        if ch == "\\":
            i += 2
            continue
        if ch == "{":
            if depth == 0:
                group_start = i
            depth += 1
        elif ch == "}":
            if depth == 0:
                raise PatternError(original, "unmatched '}'")
            depth -= 1
            if depth == 0:
                break
        i += 1

    if depth:
        raise PatternError(original, "unmatched '{'")
    if group_start is None:
        return [pattern]

    prefix, body, suffix = pattern[:group_start], pattern[group_start + 1:i], pattern[i + 1:]
    expanded: List[str] = []
    for alternative in _split_alternatives(body):
        expanded.extend(_expand(prefix + alternative + suffix, original))
    return expanded


def expand_braces(pattern: str) -> List[str]:
    """
    Expands brace alternation into plain patterns.

    ``"**/*.{c,h}"`` becomes ``["**/*.c", "**/*.h"]``. Groups may be nested
    and a pattern may hold several groups; the result is their cartesian
    product in left-to-right order. Escaped braces are left alone.

    Raises:
        PatternError: if the braces in the pattern are unbalanced.
    """
    return _expand(pattern, pattern)


def _translate_class(segment: str, i: int, pattern: str) -> Tuple[str, int]:
    # i points just past the opening "[". returns the regex class and the index past "]".
    n = len(segment)
    negate = i < n and segment[i] in "!^"
    start = i + 1 if negate else i

    end = start
    # a "]" right after the opening bracket is a literal member.
    if end < n and segment[end] == "]":
        end += 1
    while end < n and segment[end] != "]":
        if segment[end] == "\\":
            end += 1
        end += 1
    if end >= n:
        raise PatternError(pattern, "unterminated character class")

    members: List[str] = []
    k = start
    while k < end:
        ch = segment[k]
        if ch == "\\" and k + 1 < end:
            members.append(re.escape(segment[k + 1]))
            k += 2
            continue
        if ch == "-" and members and k + 1 < end:
            members.append("-")
        else:
            members.append(re.escape(ch))
        k += 1

    if negate:
        return "[^/" + "".join(members) + "]", end + 1
    return "(?!/)[" + "".join(members) + "]", end + 1


def _translate_segment(segment: str, pattern: str) -> str:
    out: List[str] = []
    n = len(segment)
    i = 0
    while i < n:
        ch = segment[i]
        i += 1
        if ch == "*":
            while i < n and segment[i] == "*":
                i += 1
            out.append(_ANY_RUN)
        elif ch == "?":
            out.append(_ANY_ONE)
        elif ch == "\\":
            if i == n:
                raise PatternError(pattern, "dangling escape character")
            out.append(re.escape(segment[i]))
            i += 1
        elif ch == "[":
            char_class, i = _translate_class(segment, i, pattern)
            out.append(char_class)
        else:
            out.append(re.escape(ch))
    return "".join(out)


def translate_glob(pattern: str) -> str:
    """Translates one brace-free glob pattern into an anchored regular expression."""
    segments = pattern.split("/")
    last = len(segments) - 1
    output = ["^"]
    for index, segment in enumerate(segments):
        if segment == "**":
            output.append(_GLOBSTAR_TAIL if index == last else _GLOBSTAR_PREFIX)
            continue
        if segment and not segment.strip("*"):
            output.append(_WHOLE_SEGMENT)
        else:
            output.append(_translate_segment(segment, pattern))
        if index != last:
            output.append("/")
    output.append(r"\Z")
    return "".join(output)


class GlobPattern(pathspec.pattern.RegexPattern):
    # a pathspec pattern speaking the anchored glob dialect described above.
    __slots__ = ()

    @classmethod
    def pattern_to_regex(cls, pattern: str) -> Tuple[Optional[str], Optional[bool]]:
        if not pattern:
            # null pattern, matches nothing.
            return None, None
        return translate_glob(pattern), True


def _compile_one(pattern: str) -> GlobPattern:
    try:
        return GlobPattern(pattern)
    except re.error as e:
        raise PatternError(pattern, str(e)) from e


class PatternSet:
    """
    A compiled, read-only set of glob patterns.

    A candidate matches the set when it matches at least one pattern. Sets are
    stateless after construction and safe to share between walks.
    """

    __slots__ = ("source_patterns", "expanded_patterns", "_spec")

    def __init__(self, source_patterns: Sequence[str], expanded_patterns: Sequence[str]):
        self.source_patterns = tuple(source_patterns)
        self.expanded_patterns = tuple(expanded_patterns)
        self._spec: Optional[pathspec.PathSpec] = None
        if self.expanded_patterns:
            self._spec = pathspec.PathSpec([_compile_one(p) for p in self.expanded_patterns])

    def matches(self, candidate: str) -> bool:
        # patterns see the candidate verbatim. PathSpec.match_file would strip a
        # leading "/" or "./" first and turn the root's "/" into "".
        if self._spec is None:
            return False
        return any(pattern.match_file(candidate) is not None for pattern in self._spec.patterns)

    def __len__(self) -> int:
        return len(self.expanded_patterns)

    def __bool__(self) -> bool:
        return bool(self.expanded_patterns)

    def __repr__(self) -> str:
        return f"PatternSet({list(self.source_patterns)!r})"


def compile_pattern_set(patterns: Iterable[str]) -> PatternSet:
    # expands braces and compiles every pattern up front so errors surface before any i/o.
    if isinstance(patterns, str):
        raise TypeError("patterns must be a sequence of strings, not a single string")

    source = [p for p in patterns if p]
    expanded: List[str] = []
    for raw in source:
        expanded.extend(expand_braces(raw))

    if len(expanded) != len(source):
        log.debug("brace_patterns_expanded", source_count=len(source), expanded_count=len(expanded))

    return PatternSet(source, expanded)


@lru_cache(maxsize=256)
def _cached_pattern_set(pattern: str) -> PatternSet:
    return compile_pattern_set([pattern])


def matches(pattern: str, candidate: str) -> bool:
    """
    Tests a single normalized candidate string against one pattern.

    The pattern is compiled (and cached) on first use, so a malformed pattern
    raises PatternError here; once compiled, matching itself never fails.
    """
    return _cached_pattern_set(pattern).matches(candidate)
