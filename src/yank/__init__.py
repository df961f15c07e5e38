"""
Yank - gather project files into one paste-ready blob for LLM prompts.

This package expands include globs, filters the candidates through the
configured excludes and every nested .gitignore, reads the survivors and
formats each one as a labelled code block, printed or sent to the clipboard.
"""

__version__ = "0.3.0"
__author__ = "Yank Team"
