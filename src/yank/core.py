"""
Core logic for yank: candidate discovery, reading and formatting.
"""

from __future__ import annotations

import fnmatch
import os
import re
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from functools import partial
from pathlib import Path
from typing import TYPE_CHECKING, Dict, Iterable, List, Mapping, Optional, Pattern, Sequence, Tuple, Union

from . import console
from .defaults import LANGUAGE_MAP, SKIPPED_DIRS
from .errors import FileReadError, PatternError
from .ignore import build_hierarchy, filter_paths, raise_discovery_error

if TYPE_CHECKING:
    from .config import YankConfig


@dataclass(frozen=True)
class ProcessedFile:
    rel_path: str
    content: str
    line_count: int


@dataclass(frozen=True)
class ProcessingStats:
    total_candidates: int = 0
    processed_count: int = 0
    skipped_count: int = 0
    skipped_reasons: Dict[str, int] = field(default_factory=dict)


# Glob expansion
def _next_group(pattern: str) -> Optional[Tuple[int, int, List[int]]]:
    """Locate the first ``{a,b}`` / ``(a|b)`` group that has alternatives."""
    for start, ch in enumerate(pattern):
        if ch not in "{(":
            continue
        sep = "," if ch == "{" else "|"
        depth = 0
        cuts: List[int] = []
        for i in range(start, len(pattern)):
            c = pattern[i]
            if c in "{(":
                depth += 1
            elif c in "})":
                depth -= 1
                if depth == 0:
                    if cuts:
                        return start, i, cuts
                    break
            elif c == sep and depth == 1:
                cuts.append(i)
    return None


def expand_braces(pattern: str) -> List[str]:
    """Expand brace and group alternatives into plain globs.

    ``src/*.{ts,tsx}`` -> ``src/*.ts``, ``src/*.tsx``; ``@(a|b)`` and
    ``(a|b)`` behave the same way. Groups without alternatives stay literal.
    """
    group = _next_group(pattern)
    if group is None:
        return [pattern]
    start, end, cuts = group
    prefix, suffix = pattern[:start], pattern[end + 1:]
    if pattern[start] == "(" and prefix.endswith("@"):
        prefix = prefix[:-1]
    bounds = [start] + cuts + [end]
    expanded: List[str] = []
    for lo, hi in zip(bounds, bounds[1:]):
        expanded.extend(expand_braces(prefix + pattern[lo + 1:hi] + suffix))
    return expanded


_GLOBSTAR = "**"


@dataclass(frozen=True)
class IncludeGlob:
    """One brace-free include glob, split into root-anchored path segments.

    ``*``, ``?`` and ``[...]`` never cross a ``/``; a ``**`` segment spans
    zero or more directories.
    """

    glob: str
    negated: bool
    segments: Tuple[Union[str, Pattern[str]], ...]

    @classmethod
    def compile(cls, glob: str) -> "IncludeGlob":
        negated = glob.startswith("!")
        body = glob[1:] if negated else glob
        while body.startswith("./"):
            body = body[2:]
        body = body.lstrip("/")
        if body.endswith("/"):
            body += _GLOBSTAR
        segments: List[Union[str, Pattern[str]]] = []
        for part in body.split("/"):
            if not part:
                continue
            if part == _GLOBSTAR:
                if not segments or segments[-1] != _GLOBSTAR:
                    segments.append(_GLOBSTAR)
                continue
            try:
                segments.append(re.compile(fnmatch.translate(part)))
            except re.error as e:
                raise PatternError(f"Invalid glob pattern: {glob} ({e})") from e
        if not segments:
            raise PatternError(f"Invalid glob pattern: '{glob}' matches nothing")
        return cls(glob, negated, tuple(segments))

    def matches(self, rel_path: str) -> bool:
        return _match_segments(self.segments, rel_path.split("/"))


def _match_segments(segments: Sequence[Union[str, Pattern[str]]], parts: Sequence[str]) -> bool:
    if not segments:
        return not parts
    head = segments[0]
    if head == _GLOBSTAR:
        return any(_match_segments(segments[1:], parts[i:]) for i in range(len(parts) + 1))
    if not parts or not head.match(parts[0]):
        return False
    return _match_segments(segments[1:], parts[1:])


def compile_globs(patterns: Iterable[str]) -> List[IncludeGlob]:
    """Compile include globs, anchored at the working root."""
    return [IncludeGlob.compile(g) for p in patterns for g in expand_braces(p)]


def _included(globs: Sequence[IncludeGlob], rel_path: str) -> bool:
    for glob in reversed(globs):
        if glob.matches(rel_path):
            return not glob.negated
    return False


def expand_globs(patterns: Sequence[str], root: Path) -> List[Path]:
    """Absolute paths of files under *root* matching any include glob.

    node_modules and .git are never entered and symlinked directories are
    not followed; symlinked files are returned like any other file.
    """
    globs = compile_globs(patterns)
    found: List[Path] = []
    for dirpath, dirnames, filenames in os.walk(root, onerror=raise_discovery_error):
        dirnames[:] = [d for d in dirnames if d not in SKIPPED_DIRS]
        for name in filenames:
            path = Path(dirpath) / name
            if _included(globs, path.relative_to(root).as_posix()):
                found.append(path)
    return sorted(found, key=lambda p: p.relative_to(root).as_posix())


# File reading
def _is_binary(data: bytes) -> bool:
    return b"\0" in data


def count_lines(content: str) -> int:
    return content.count("\n") + 1


def _read_one(path: Path, root: Path) -> Tuple[str, Optional[ProcessedFile], Optional[str]]:
    rel = path.relative_to(root).as_posix()
    try:
        raw = path.read_bytes()
        if _is_binary(raw):
            raise FileReadError("binary file")
        content = raw.decode("utf-8")
    except FileReadError as e:
        return rel, None, str(e)
    except UnicodeDecodeError:
        return rel, None, "cannot decode as utf-8"
    except OSError as e:
        return rel, None, e.strerror or str(e)
    return rel, ProcessedFile(rel, content, count_lines(content)), None


def read_files(
    survivors: Sequence[Path],
    root: Path,
    debug: bool = False,
    max_workers: Optional[int] = None,
) -> Tuple[List[ProcessedFile], ProcessingStats]:
    """Read every survivor concurrently and fold the outcomes in input order."""
    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        outcomes = list(pool.map(partial(_read_one, root=root), survivors))

    files: List[ProcessedFile] = []
    reasons: Dict[str, int] = {}
    for rel, processed, reason in outcomes:
        if processed is None:
            reason = reason or "unknown error"
            reasons[reason] = reasons.get(reason, 0) + 1
            if debug:
                console.warn(f"Failed to read {rel}: {reason}")
            continue
        files.append(processed)

    stats = ProcessingStats(
        total_candidates=len(survivors),
        processed_count=len(files),
        skipped_count=len(survivors) - len(files),
        skipped_reasons=reasons,
    )
    return files, stats


def process_files(
    config: "YankConfig",
    root: Optional[Path] = None,
) -> Tuple[List[ProcessedFile], ProcessingStats]:
    root = Path(root if root is not None else Path.cwd()).resolve()
    hierarchy = build_hierarchy(root, config.exclude, debug=config.debug)
    candidates = expand_globs(config.include, root)
    survivors = filter_paths(candidates, hierarchy)
    if config.debug:
        console.debug(
            f"Files found: {len(candidates)}. After ignore rules: {len(survivors)}."
        )
    return read_files(survivors, root, debug=config.debug)


# Output
def detect_language(rel_path: str, lang_map: Optional[Mapping[str, str]] = None) -> str:
    filename = rel_path.rsplit("/", 1)[-1]
    if lang_map:
        override = lang_map.get(filename) or lang_map.get(rel_path)
        if override:
            return override
    if filename in LANGUAGE_MAP:
        return LANGUAGE_MAP[filename]
    if "." not in filename:
        return ""
    return LANGUAGE_MAP.get(filename.rsplit(".", 1)[-1].lower(), "")


def render_output(files: Iterable[ProcessedFile], lang_map: Optional[Mapping[str, str]] = None) -> str:
    """Header line plus fenced block per file, blocks separated by a blank line."""
    chunks: List[str] = []
    for f in files:
        lang = detect_language(f.rel_path, lang_map)
        fence = "````" if lang == "markdown" else "```"
        body = f.content if f.content.endswith("\n") else f.content + "\n"
        chunks.append(f"--- {f.rel_path} ---\n{fence}{lang}\n{body}{fence}")
    return "\n\n".join(chunks)
