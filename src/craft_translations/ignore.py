"""Layered ``.translateignore`` handling.

Every directory between the scan root and a candidate path may carry an
ignore file in gitignore syntax. Deeper files can re-include what shallower
ones excluded (``!pattern``), but nothing can re-include a path below a
directory that is itself ignored.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path

import structlog

from craft_translations.errors import ConfigurationError

log = structlog.get_logger()

_NEVER = "(?!)"


def _line_to_regex(line: str) -> str:
    """Translate one gitignore pattern into a regex fragment."""
    if not line:
        return _NEVER

    slash = line.find("/")
    if slash != -1 and slash != len(line) - 1:
        # A slash anywhere but the end anchors the pattern to the ignore file's directory
        if slash == 0:
            line = line[1:]
        anchored = True
    else:
        anchored = False

    regex = re.escape(line.replace("\\", ""))
    regex = re.sub(
        r"\\\[(!?)([^\[\]]*)\\\]",
        lambda m: "[" + ("^" if m.group(1) else "") + m.group(2).replace("\\-", "-") + "]",
        regex,
    )
    regex = re.sub(
        r"(?:(?:\\\*){2,}(/?))+",
        lambda m: "(?:(?:(?!//).(?<!//))+" + m.group(1) + ")?",
        regex,
    )
    regex = regex.replace("\\*", "[^/]*").replace("\\?", "[^/]")

    return (
        ("" if anchored else "(?:[^/]+/)*")
        + regex
        + ("" if line.endswith("/") else "(?:$|/)")
    )


def gitignore_to_regex(content: str, *, inverted: bool = False) -> re.Pattern[str]:
    """Compile gitignore file content into a single regex.

    Later lines take precedence over earlier ones. With ``inverted`` the
    regex matches the paths the negated (``!``) patterns re-include instead.

    Args:
        content: Ignore file content.
        inverted: Build the inclusion regex instead of the exclusion regex.

    Returns:
        Compiled pattern to be matched against paths relative to the ignore
        file's directory (directories with a trailing slash).
    """
    content = re.sub(r"(?<!\\)#[^\n\r]*", "", content)

    regex = _line_to_regex("")
    for line in re.split(r"\r\n?|\n", content):
        line = re.sub(r"(?<!\\)[ \t]+$", "", line)

        negated = line.startswith("!")
        if negated:
            line = line[1:]
        if not line:
            continue

        if negated != inverted:
            regex = "(?!" + _line_to_regex(line) + "$)" + regex
        else:
            regex = "(?:" + regex + "|" + _line_to_regex(line) + ")"

    return re.compile("^(?:" + regex + ")", re.DOTALL)


@dataclass(frozen=True)
class IgnoreRuleSet:
    """Exclusion and inclusion patterns of one ignore file."""

    exclusion: re.Pattern[str]
    inclusion: re.Pattern[str]

    @classmethod
    def parse(cls, content: str) -> IgnoreRuleSet:
        return cls(
            exclusion=gitignore_to_regex(content),
            inclusion=gitignore_to_regex(content, inverted=True),
        )

    def excludes(self, relative_path: str) -> bool:
        return self.exclusion.match(relative_path) is not None

    def includes(self, relative_path: str) -> bool:
        return self.inclusion.match(relative_path) is not None


def normalize_path(path: str | Path) -> str:
    normalized = os.path.abspath(path)
    if os.sep == "\\":
        normalized = normalized.replace("\\", "/")
    return normalized


class IgnoreFilter:
    """Decides whether paths below a scan root are ignored.

    Both caches live as long as the filter; create one filter per scan.
    """

    def __init__(self, base_dir: str | Path, ignore_filename: str = ".translateignore") -> None:
        self.base_dir = normalize_path(base_dir).rstrip("/") or "/"
        self.ignore_filename = ignore_filename
        self._rule_sets: dict[str, IgnoreRuleSet | None] = {}
        self._ignored: dict[str, bool] = {}

    def is_ignored(self, path: str | Path) -> bool:
        """Check a file or directory against every ignore file above it.

        Raises:
            ConfigurationError: An ignore file exists but cannot be read.
        """
        candidate = normalize_path(path)
        if os.path.isdir(candidate) and not candidate.endswith("/"):
            candidate += "/"

        cached = self._ignored.get(candidate)
        if cached is not None:
            return cached

        ignored = False
        for parent in self._parents_downwards(candidate):
            if self.is_ignored(parent):
                ignored = True
                break

            rules = self._read_ignore_file(f"{parent.rstrip('/')}/{self.ignore_filename}")
            if rules is None:
                continue

            relative = candidate[len(parent.rstrip("/")) + 1 :]
            if rules.excludes(relative):
                ignored = True
                continue
            if rules.includes(relative):
                ignored = False

        self._ignored[candidate] = ignored
        return ignored

    def _parents_downwards(self, candidate: str) -> list[str]:
        """Ancestors of candidate inside the base dir, root first."""
        parents: list[str] = []
        current = candidate.rstrip("/")
        while True:
            parent = os.path.dirname(current)
            if parent == current:
                break
            if parent != self.base_dir and not parent.startswith(self.base_dir.rstrip("/") + "/"):
                break
            parents.append(parent)
            current = parent
        parents.reverse()
        return parents

    def _read_ignore_file(self, path: str) -> IgnoreRuleSet | None:
        if path in self._rule_sets:
            return self._rule_sets[path]

        if not os.path.lexists(path):
            self._rule_sets[path] = None
            return None

        if not os.path.isfile(path) or not os.access(path, os.R_OK):
            raise ConfigurationError(path, "not a readable file")

        try:
            content = Path(path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigurationError(path, str(e)) from e

        log.debug("Loaded ignore file", path=path)
        rules = IgnoreRuleSet.parse(content)
        self._rule_sets[path] = rules
        return rules
