"""
Layered .gitignore handling.

Rule sets are compiled with pathspec's gitwildmatch patterns and evaluated
last-match-wins. A hierarchy maps every directory that owns a .gitignore to
its effective rule set (inherited rules first, its own rules on top), and the
path filter resolves each candidate against the nearest such directory.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Tuple

import pathspec

from . import console
from .defaults import IGNORE_FILENAME, SKIPPED_DIRS
from .errors import DiscoveryError, PatternError

_GitWildMatch = pathspec.util.lookup_pattern("gitwildmatch")

InvalidPatternHook = Callable[[str, Exception], None]


# Ignore-rule engine
@dataclass(frozen=True)
class IgnoreRule:
    pattern: str
    negated: bool
    order: int
    compiled: pathspec.Pattern = field(compare=False, repr=False)

    def hits(self, path: str) -> bool:
        return self.compiled.match_file(path) is not None

    @property
    def line(self) -> str:
        return f"!{self.pattern}" if self.negated else self.pattern


def _trim_trailing(line: str) -> str:
    """Drop trailing whitespace unless the last space is escaped (``name\\ ``)."""
    trimmed = line.rstrip()
    if len(trimmed) < len(line) and trimmed.endswith("\\"):
        return line[: len(trimmed) + 1]
    return trimmed


def _parse_rules(
    lines: Iterable[str],
    start: int,
    on_invalid: Optional[InvalidPatternHook] = None,
) -> List[IgnoreRule]:
    rules: List[IgnoreRule] = []
    for raw in lines:
        line = _trim_trailing(raw)
        if not line.strip() or line.startswith("#"):
            continue
        negated = line.startswith("!")
        pattern = line[1:] if negated else line
        if not pattern:
            continue
        try:
            compiled = _GitWildMatch(pattern)
        except ValueError as e:
            if on_invalid is None:
                raise PatternError(f"Invalid pattern '{line}': {e}") from e
            on_invalid(line, e)
            continue
        if compiled.include is None:
            # pathspec treats a few edge cases ("/") as matching nothing
            continue
        rules.append(IgnoreRule(pattern, negated, start + len(rules), compiled))
    return rules


@dataclass(frozen=True)
class IgnoreRuleSet:
    """Ordered gitignore rules; the last rule matching a path decides."""

    rules: Tuple[IgnoreRule, ...] = ()

    @classmethod
    def build(
        cls,
        patterns: Iterable[str],
        on_invalid: Optional[InvalidPatternHook] = None,
    ) -> "IgnoreRuleSet":
        return cls().layer(patterns, on_invalid)

    def layer(
        self,
        patterns: Iterable[str],
        on_invalid: Optional[InvalidPatternHook] = None,
    ) -> "IgnoreRuleSet":
        """Return a new set with *patterns* appended after the current rules.

        Invalid lines raise PatternError unless *on_invalid* is given, in
        which case it is called and the line is dropped.
        """
        added = _parse_rules(patterns, len(self.rules), on_invalid)
        if not added:
            return self
        return IgnoreRuleSet(self.rules + tuple(added))

    @property
    def patterns(self) -> List[str]:
        return [rule.line for rule in self.rules]

    def matches(self, rel_path: str, is_dir: bool = False) -> bool:
        """Return True when *rel_path* (POSIX, relative to this set's root) is ignored.

        Every ancestor directory is tested first. Once a directory is
        ignored nothing below it can be re-included, so ``temp/`` hides
        ``temp/keep.txt`` for good while ``temp/*`` leaves the directory
        node alone and lets a later ``!temp/keep.txt`` win.
        """
        path = rel_path.strip("/")
        if not path or not self.rules:
            return False
        if self.matches_ancestor(path):
            return True
        return self._decide(path + "/" if is_dir else path)

    def matches_ancestor(self, rel_path: str) -> bool:
        """True when some directory above *rel_path* is ignored."""
        parts = rel_path.strip("/").split("/")
        for depth in range(1, len(parts)):
            if self._decide("/".join(parts[:depth]) + "/"):
                return True
        return False

    def _decide(self, path: str) -> bool:
        for rule in reversed(self.rules):
            if rule.hits(path):
                return not rule.negated
        return False


# Ignore hierarchy
@dataclass(frozen=True)
class IgnoreScope:
    directory: Path
    rules: IgnoreRuleSet
    inherited: IgnoreRuleSet
    own_patterns: Tuple[str, ...] = ()

    def names_itself(self) -> bool:
        """True when the directory's own ignore file lists itself by name."""
        targets = {IGNORE_FILENAME, "/" + IGNORE_FILENAME}
        return any(line.strip() in targets for line in self.own_patterns)


@dataclass
class IgnoreHierarchy:
    root: Path
    configured: IgnoreRuleSet
    scopes: Dict[Path, IgnoreScope] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.root not in self.scopes:
            self.scopes[self.root] = IgnoreScope(self.root, self.configured, self.configured)

    def scope_for(self, directory: Path) -> IgnoreScope:
        """Nearest scope at or above *directory*; the root scope always exists."""
        current = directory
        while True:
            scope = self.scopes.get(current)
            if scope is not None:
                return scope
            if current == self.root or current.parent == current:
                return self.scopes[self.root]
            current = current.parent

    def ignores(self, path: Path) -> bool:
        rel = path.relative_to(self.root).as_posix()
        # a directory excluded by configuration stays excluded whatever a
        # nested .gitignore says; file-level configured rules are layered
        # under every scope and can be negated like any other rule
        if self.configured.matches_ancestor(rel):
            return True

        directory = path.parent
        scope = self.scope_for(directory)
        local = path.relative_to(scope.directory).as_posix()
        if not scope.rules.matches(local):
            return False

        if (
            path.name == IGNORE_FILENAME
            and directory == scope.directory
            and not scope.names_itself()
        ):
            return scope.inherited.matches(rel)
        return True


def raise_discovery_error(err: OSError) -> None:
    raise DiscoveryError(f"Could not scan '{err.filename}': {err.strerror or err}") from err


def discover_ignore_files(root: Path) -> List[Path]:
    """Every .gitignore under *root*, shallowest first."""
    found: List[Path] = []
    for dirpath, dirnames, filenames in os.walk(root, onerror=raise_discovery_error):
        dirnames[:] = [d for d in dirnames if d not in SKIPPED_DIRS]
        if IGNORE_FILENAME in filenames:
            found.append(Path(dirpath) / IGNORE_FILENAME)
    return sorted(found, key=lambda p: (len(p.relative_to(root).parts), p.as_posix()))


def build_hierarchy(
    root: Path,
    configured_excludes: Iterable[str],
    debug: bool = False,
) -> IgnoreHierarchy:
    root = Path(root)
    hierarchy = IgnoreHierarchy(root, IgnoreRuleSet.build(configured_excludes))

    for ignore_path in discover_ignore_files(root):
        rel = ignore_path.relative_to(root).as_posix()
        directory = ignore_path.parent
        if directory == root:
            base = hierarchy.configured
        else:
            base = hierarchy.scope_for(directory.parent).rules

        try:
            lines = tuple(ignore_path.read_text(encoding="utf-8").splitlines())
        except (OSError, UnicodeDecodeError) as e:
            if debug:
                console.debug(f"Failed to read: {rel} ({e})")
            continue

        def _skip_line(line: str, err: Exception) -> None:
            if debug:
                console.debug(f"Skipping invalid pattern '{line}' in {rel}: {err}")

        hierarchy.scopes[directory] = IgnoreScope(
            directory,
            base.layer(lines, on_invalid=_skip_line),
            base,
            lines,
        )
        if debug:
            console.debug(f"Loaded: {rel}")

    return hierarchy


def filter_paths(candidates: Iterable[Path], hierarchy: IgnoreHierarchy) -> List[Path]:
    """Drop ignored candidates and sort survivors by root-relative path."""
    kept: List[Tuple[str, Path]] = []
    for path in candidates:
        try:
            rel = path.relative_to(hierarchy.root).as_posix()
        except ValueError:
            continue
        if not hierarchy.ignores(path):
            kept.append((rel, path))
    kept.sort(key=lambda item: item[0])
    return [path for _, path in kept]
