"""Denylist filter for the raw-SQL read path.

Manifesto:
    ``select_primitive`` lets feature code run hand-written SELECT text.
    Before such text reaches a connection it is scanned for keywords and
    character sequences that have no business on a read path: statement
    separators, comment openers, DML/DDL keywords, file and timing
    functions.

    This is a heuristic, not a SQL parser. It rejects on the first match
    and it will reject some harmless statements (a string literal that
    happens to contain ``;``) and can miss hostile ones a real parser would
    catch. Values must still travel as bound parameters; the filter is a
    second line, never the first.

Guardrails:
    ❌ ``executor.select_primitive(role, f"SELECT * FROM t WHERE id = {x}", ...)``
    ✅ ``executor.select_primitive(role, "SELECT * FROM t WHERE id = ?", [x], ...)``
    ❌ Treating ``is_safe()`` as proof a statement is harmless
    ✅ Adjusting the denylist through settings, not by editing this module

Tags:
    shiftline, sql, security, denylist, heuristic
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass

from shiftline.core.errors import UnsafeQueryError

DEFAULT_DENYLIST: tuple[str, ...] = (
    # Statement separators and comment openers
    ";",
    "--",
    "/*",
    "*/",
    "#",
    # DML / DDL
    "INSERT",
    "UPDATE",
    "DELETE",
    "DROP",
    "ALTER",
    "CREATE",
    "TRUNCATE",
    "REPLACE",
    "RENAME",
    "GRANT",
    "REVOKE",
    # Procedures
    "EXEC",
    "EXECUTE",
    "CALL",
    "MERGE",
    # Exfiltration and timing probes
    "UNION",
    "INTO OUTFILE",
    "INTO DUMPFILE",
    "LOAD_FILE",
    "SLEEP",
    "BENCHMARK",
)

DEFAULT_ALLOWED_LEADING: tuple[str, ...] = ("SELECT",)

LEADING_KEYWORD_PATTERN = "leading keyword"

_WORDLIKE_RE = re.compile(r"^\w+(?: +\w+)*$")
_LEADING_WORD_RE = re.compile(r"[A-Za-z_]+")


@dataclass(frozen=True)
class _CompiledPattern:
    entry: str
    regex: re.Pattern[str]


def _compile_entry(entry: str) -> _CompiledPattern:
    """Word entries match as whole words; anything else as a literal substring."""
    text = entry.strip()
    if _WORDLIKE_RE.match(text):
        body = r"\s+".join(re.escape(word) for word in text.split())
        regex = re.compile(rf"\b{body}\b", re.IGNORECASE)
    else:
        regex = re.compile(re.escape(text), re.IGNORECASE)
    return _CompiledPattern(entry=text, regex=regex)


class UnsafeSQLFilter:
    """
    Case-insensitive keyword/pattern denylist for raw SELECT text.

    Args:
        denylist: Entries to reject. Word entries (``DROP``, ``INTO OUTFILE``)
            match whole words; others (``;``, ``--``) match anywhere.
        allowed_leading: Keywords a statement may start with. Empty disables
            the leading-keyword check.
    """

    def __init__(
        self,
        denylist: Iterable[str] = DEFAULT_DENYLIST,
        allowed_leading: Iterable[str] = DEFAULT_ALLOWED_LEADING,
    ):
        self._patterns = tuple(_compile_entry(e) for e in denylist if e and e.strip())
        self._allowed_leading = tuple(k.strip().upper() for k in allowed_leading if k and k.strip())

    @classmethod
    def from_settings(cls, settings) -> UnsafeSQLFilter:
        return cls(settings.sql_denylist, settings.sql_allowed_leading)

    @property
    def denylist(self) -> tuple[str, ...]:
        return tuple(p.entry for p in self._patterns)

    def check(self, sql: str) -> None:
        """Raise ``UnsafeQueryError`` naming the first matched pattern."""
        text = sql.strip()
        for pattern in self._patterns:
            if pattern.regex.search(text):
                raise UnsafeQueryError(
                    f"Raw SQL rejected: matched denylisted pattern {pattern.entry!r}",
                    pattern=pattern.entry,
                )

        if self._allowed_leading:
            match = _LEADING_WORD_RE.match(text)
            first = match.group(0).upper() if match else ""
            if first not in self._allowed_leading:
                raise UnsafeQueryError(
                    f"Raw SQL must start with one of: {', '.join(self._allowed_leading)}",
                    pattern=LEADING_KEYWORD_PATTERN,
                )

    def is_safe(self, sql: str) -> bool:
        """Boolean form of :meth:`check`."""
        try:
            self.check(sql)
        except UnsafeQueryError:
            return False
        return True


__all__ = [
    "DEFAULT_ALLOWED_LEADING",
    "DEFAULT_DENYLIST",
    "LEADING_KEYWORD_PATTERN",
    "UnsafeSQLFilter",
]
