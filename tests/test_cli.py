import pyperclip
import pytest

from yank import __version__, cli


@pytest.fixture
def project(make_tree, monkeypatch):
    root = make_tree({
        "src/app.py": "print('hi')\n",
        "README.md": "# Demo\n",
        "debug.log": "noise",
        "logo.png": b"\x89PNG\r\n\x1a\n\x00",
    })
    monkeypatch.chdir(root)
    return root


def test_prints_blocks_to_stdout(project, capsys):
    cli.main([])
    out = capsys.readouterr().out
    assert "--- README.md ---\n````markdown\n# Demo\n````" in out
    assert "--- src/app.py ---\n```python\nprint('hi')\n```" in out
    assert "debug.log" not in out
    assert "logo.png" not in out


def test_positional_directory(project, capsys):
    cli.main(["src"])
    out = capsys.readouterr().out
    assert out.startswith("--- src/app.py ---")
    assert "README.md" not in out


def test_exclude_flag(project, capsys):
    cli.main(["-x", "*.md"])
    out = capsys.readouterr().out
    assert "README.md" not in out
    assert "src/app.py" in out


def test_stats(project, capsys):
    cli.main(["--stats"])
    err = capsys.readouterr().err
    assert "Files: 2" in err
    assert "Size: " in err


def test_clipboard(project, monkeypatch, capsys):
    copied = []
    monkeypatch.setattr(cli.pyperclip, "copy", copied.append)
    cli.main(["-c"])
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "Yanked 2 files to clipboard." in captured.err
    assert copied and "--- src/app.py ---" in copied[0]


def test_clipboard_failure(project, monkeypatch, capsys):
    def _fail(text):
        raise pyperclip.PyperclipException("no copy mechanism")

    monkeypatch.setattr(cli.pyperclip, "copy", _fail)
    with pytest.raises(SystemExit) as exc:
        cli.main(["--clip"])
    assert exc.value.code == 1
    assert "Could not write to clipboard" in capsys.readouterr().err


def test_no_files_matched(root, monkeypatch, capsys):
    monkeypatch.chdir(root)
    with pytest.raises(SystemExit) as exc:
        cli.main([])
    assert exc.value.code == 1
    assert "No files matched the include/ignore patterns." in capsys.readouterr().err


def test_invalid_glob(project, capsys):
    with pytest.raises(SystemExit) as exc:
        cli.main(["src/[abc"])
    assert exc.value.code == 1
    err = capsys.readouterr().err
    assert "Error: Invalid glob pattern" in err
    assert "Unclosed character class" in err


def test_skipped_files_are_summarised(project, capsys):
    (project / "data.txt").write_bytes(b"a\x00b")
    cli.main([])
    assert "Skipped 1 file(s): binary file" in capsys.readouterr().err


def test_debug_dumps_configuration(project, capsys):
    cli.main(["--debug"])
    err = capsys.readouterr().err
    assert "Yank starting with configuration:" in err
    assert "Files found:" in err


def test_version(capsys):
    with pytest.raises(SystemExit) as exc:
        cli.main(["--version"])
    assert exc.value.code == 0
    assert f"yank {__version__}" in capsys.readouterr().out


@pytest.mark.parametrize(
    "num_bytes, expected",
    [(0, "0 B"), (512, "512 B"), (1234, "1.2 kB"), (5_000_000, "5.0 MB"), (3 * 10**9, "3.0 GB")],
)
def test_format_size(num_bytes, expected):
    assert cli.format_size(num_bytes) == expected
