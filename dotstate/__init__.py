"""Pluggable file systems, archive writers, git status parsing and helpers for managing dotfiles."""

__version__ = "0.1.0"