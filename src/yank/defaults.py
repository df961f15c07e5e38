"""
Built-in deny-lists and the extension -> fence language table.
"""

from __future__ import annotations

from typing import Dict, List, Tuple

IGNORE_FILENAME = ".gitignore"

# never traversed, neither for candidates nor for ignore files
SKIPPED_DIRS: Tuple[str, ...] = ("node_modules", ".git")

DEFAULT_EXCLUDE_PATTERNS: List[str] = [
    # version control
    ".git/**",
    # dependency and build output
    ".next/**", "node_modules/**", "vendor/**", "dist/**", "build/**",
    "out/**", "target/**", "bin/**", "obj/**",
    # editors
    ".idea/**", ".vscode/**", ".vs/**", ".settings/**",
    # language caches
    ".gradle/**", ".mvn/**", ".pytest_cache/**", "__pycache__/**",
    ".sass-cache/**", ".mypy_cache/**", ".ruff_cache/**", ".tox/**",
    ".venv/**", "venv/**", "*.egg-info/**",
    # deployment
    ".vercel/**", ".turbo/**",
    # test output
    "coverage/**", "test-results/**", "htmlcov/**",
    # ignore files, tool config and lock files
    ".gitignore", "yank.toml", "yank.yaml", "yank.yml", "yank.json",
    "pnpm-lock.yaml", "package-lock.json", "yarn.lock", "Cargo.lock",
    "Gemfile.lock", "composer.lock", "mix.lock", "poetry.lock",
    "Pipfile.lock", "uv.lock",
    # scratch files
    "*.pyc", "*.pyo", "*.pyd", "*.log", "*.tmp", "*.temp", "*.bak", "*~",
    # OS litter
    ".DS_Store", "Thumbs.db",
    # secrets
    ".env*",
]

BINARY_FILE_EXTENSIONS: List[str] = [
    # archives
    "7z", "a", "apk", "ar", "bz2", "cab", "cpio", "deb", "dmg", "gz", "iso",
    "jar", "lz", "lz4", "lzma", "nupkg", "rar", "rpm", "tar", "taz", "tbz",
    "tbz2", "tgz", "tlz", "txz", "whl", "xz", "z", "zip", "zst",
    # images
    "ai", "bmp", "gif", "heic", "ico", "icns", "jpeg", "jpg", "png", "psd",
    "svgz", "tif", "tiff", "webp",
    # video
    "avi", "flv", "m4v", "mkv", "mov", "mp4", "mpeg", "mpg", "webm", "wmv",
    # audio
    "aac", "aiff", "flac", "m4a", "mp3", "ogg", "opus", "wav", "wma",
    # documents
    "doc", "docx", "dotx", "epub", "mobi", "odt", "pdf", "ppt", "pptx",
    "rtf", "xls", "xlsx",
    # other
    "bin", "class", "core", "dat", "db", "dll", "dylib", "eot", "exe",
    "lock", "o", "obj", "pak", "pdb", "so", "sqlite", "swp", "swo", "ttf",
    "woff", "woff2",
]


def binary_exclude_patterns() -> List[str]:
    return [f"*.{ext}" for ext in BINARY_FILE_EXTENSIONS]


LANGUAGE_MAP: Dict[str, str] = {
    # web
    "ts": "typescript",
    "js": "javascript",
    "mjs": "javascript",
    "cjs": "javascript",
    "tsx": "tsx",
    "jsx": "jsx",
    "html": "html",
    "css": "css",
    "scss": "scss",
    "less": "less",
    "json": "json",
    "md": "markdown",
    "mdx": "mdx",
    "yaml": "yaml",
    "yml": "yaml",
    "toml": "toml",
    "xml": "xml",
    "svg": "xml",
    "svelte": "svelte",
    "vue": "vue",
    # backend & systems
    "py": "python",
    "pyi": "python",
    "rb": "ruby",
    "go": "go",
    "rs": "rust",
    "php": "php",
    "java": "java",
    "kt": "kotlin",
    "kts": "kotlin",
    "cs": "csharp",
    "fs": "fsharp",
    "cpp": "cpp",
    "c": "c",
    "h": "c",
    "hpp": "cpp",
    "lua": "lua",
    "pl": "perl",
    "swift": "swift",
    "scala": "scala",
    "ex": "elixir",
    "exs": "elixir",
    "cr": "crystal",
    # shell & config
    "sh": "shell",
    "bash": "bash",
    "zsh": "zsh",
    "fish": "fish",
    "ps1": "powershell",
    "Dockerfile": "dockerfile",
    "dockerfile": "dockerfile",
    "Makefile": "makefile",
    "tf": "terraform",
    "hcl": "hcl",
    "nginx": "nginx",
    "conf": "ini",
    "ini": "ini",
    "cfg": "ini",
    # sql & data
    "sql": "sql",
    "graphql": "graphql",
    "gql": "graphql",
    # other
    "r": "r",
    "dart": "dart",
    "hs": "haskell",
    "erl": "erlang",
    "clj": "clojure",
    "elm": "elm",
}
