"""Static package metadata surfaced by the CLI ``info`` command.

Purpose
-------
Keep the project name, version and console-script name in one place so the
CLI banner, ``--version`` and packaging stay aligned with ``pyproject.toml``.

Contents
--------
* Module constants: :data:`name`, :data:`title`, :data:`version`,
  :data:`homepage`, :data:`author`, :data:`shell_command`.
* :func:`print_info` – emit the metadata banner through a writer callback.
"""

from __future__ import annotations

from collections.abc import Callable

import click

name = "lib_log_rolling"
title = "Rolling file logging core with pattern layouts and quiet writers"
version = "0.1.0"
homepage = "https://github.com/bitranox/lib_log_rolling"
author = "bitranox"
author_email = "bitranox@gmail.com"
shell_command = "lib_log_rolling"

_FIELDS = (
    ("name", name),
    ("title", title),
    ("version", version),
    ("homepage", homepage),
    ("author", author),
    ("author_email", author_email),
    ("shell_command", shell_command),
)


def print_info(writer: Callable[[str], None] | None = None) -> None:
    """Emit the metadata banner line by line.

    Parameters
    ----------
    writer:
        Receives each line including its trailing newline; defaults to
        writing on stdout via :func:`click.echo`.

    Examples
    --------
    >>> lines = []
    >>> print_info(writer=lines.append)
    >>> lines[0]
    'Info for lib_log_rolling:\\n'
    """

    emit = writer if writer is not None else (lambda text: click.echo(text, nl=False))
    emit(f"Info for {name}:\n")
    emit("\n")
    width = max(len(label) for label, _ in _FIELDS)
    for label, value in _FIELDS:
        emit(f"    {label:<{width}} = {value}\n")


__all__ = [
    "author",
    "author_email",
    "homepage",
    "name",
    "print_info",
    "shell_command",
    "title",
    "version",
]
