#!/usr/bin/env python3
"""Temporary working directory management and small filesystem helpers."""

from __future__ import annotations

import os
import shutil
import tempfile
from typing import List, Optional

from logging_utils import Logger


class TempDir:
    """A temporary directory that the process changes into.

    The working directory is process-global; enter_new() and clean() must be
    paired, or use the instance as a context manager.
    """

    def __init__(self, path: str, previous_cwd: Optional[str] = None) -> None:
        self.path = path
        self.previous_cwd = previous_cwd

    @classmethod
    def enter_new(cls) -> "TempDir":
        """Create a temp dir inside the current directory and chdir into it."""
        cwd = os.getcwd()
        path = tempfile.mkdtemp(dir=cwd)
        os.chdir(path)
        Logger.debug(f"entered temporary directory: {path}")
        return cls(path, previous_cwd=cwd)

    def clean(self) -> None:
        """Return to the previous directory and delete the temp dir."""
        if self.previous_cwd and os.getcwd() == self.path:
            os.chdir(self.previous_cwd)
        shutil.rmtree(self.path)
        Logger.debug(f"removed temporary directory: {self.path}")

    def __enter__(self) -> "TempDir":
        return self

    def __exit__(self, *exc_info) -> None:
        if os.path.exists(self.path):
            self.clean()


def list_files(directory: str) -> List[str]:
    """Return every path under ``directory``, the directory itself first."""
    paths = [directory]
    for root, dirs, files in os.walk(directory):
        dirs.sort()
        for name in dirs + sorted(files):
            paths.append(os.path.join(root, name))
    return paths


def show_files(directory: str) -> None:
    for path in list_files(directory):
        Logger.info(path)


def show_pwd() -> str:
    pwd = os.getcwd()
    Logger.info(pwd)
    return pwd
