"""
CLI entrypoint for yank.
"""
import argparse
import sys
from pathlib import Path
from pprint import pformat
from typing import Optional, Sequence

import pyperclip

from . import __version__, console
from .config import YankConfig, load_config
from .core import ProcessingStats, process_files, render_output
from .errors import ClipboardError, NoFilesMatchedError, YankError


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="yank",
        usage="%(prog)s [paths...] [options]",
        description="Gather project files as labelled code blocks for pasting into an LLM.",
    )
    p.add_argument("paths", nargs="*", help="Files, directories or globs to include")
    p.add_argument(
        "-i",
        "--include",
        nargs="+",
        default=None,
        help="Glob patterns for files to include. Combined with any positional paths.",
    )
    p.add_argument("-x", "--exclude", nargs="+", default=None, help="Glob patterns to exclude.")
    p.add_argument("-c", "--clip", action="store_true", default=None, help="Output to clipboard.")
    p.add_argument("-s", "--stats", action="store_true", default=None, help="Print summary stats.")
    p.add_argument("-C", "--config", type=Path, help="Path to a custom config.")
    p.add_argument(
        "--lang-map",
        help='JSON string of language overrides (e.g. \'{"LICENSE":"text"}\')',
    )
    p.add_argument("--debug", action="store_true", default=None, help="Enable debug output.")
    p.add_argument("-v", "--version", action="version", version=f"%(prog)s {__version__}")
    return p.parse_args(argv)


def format_size(num_bytes: int) -> str:
    """Metric, one decimal: 512 B, 1.2 kB, 3.4 MB."""
    size = float(num_bytes)
    for unit in ("B", "kB", "MB", "GB"):
        if size < 1000 or unit == "GB":
            return f"{int(size)} {unit}" if unit == "B" else f"{size:.1f} {unit}"
        size /= 1000
    return f"{size:.1f} GB"


def copy_to_clipboard(text: str) -> None:
    try:
        pyperclip.copy(text)
    except pyperclip.PyperclipException as e:
        raise ClipboardError(f"Could not write to clipboard: {e}") from e


def _report_skipped(stats: ProcessingStats) -> None:
    for reason, count in sorted(stats.skipped_reasons.items()):
        console.warn(f"Skipped {count} file(s): {reason}")


def _print_stats(files_count: int, output: str) -> None:
    size = format_size(len(output.encode("utf-8")))
    print(f"---\nFiles: {files_count}\nSize: {size}", file=sys.stderr)


def run(config: YankConfig, root: Optional[Path] = None) -> str:
    """Gather, render and deliver; returns the rendered output."""
    if config.debug:
        console.debug("Yank starting with configuration:")
        console.debug(pformat(config, width=120))

    files, stats = process_files(config, root)
    if stats.skipped_count:
        _report_skipped(stats)
    if not files:
        raise NoFilesMatchedError("No files matched the include/ignore patterns.")

    output = render_output(files, config.lang_map)
    if config.clip:
        copy_to_clipboard(output)
        console.success(f"Yanked {len(files)} files to clipboard.")
    else:
        sys.stdout.write(output + "\n")

    if config.stats:
        _print_stats(len(files), output)
    return output


def main(argv: Optional[Sequence[str]] = None) -> None:
    try:
        ns = _parse_args(argv)
        config = load_config(
            paths=ns.paths,
            include=ns.include,
            exclude=ns.exclude,
            clip=ns.clip,
            stats=ns.stats,
            debug=ns.debug,
            lang_map=ns.lang_map,
            config_path=ns.config,
        )
        run(config)
    except NoFilesMatchedError as e:
        console.warn(str(e))
        sys.exit(1)
    except YankError as e:
        console.error(str(e))
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nCancelled.", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        console.error(f"Unexpected error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
