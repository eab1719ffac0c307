"""Shared fixtures for git-helpers tests."""

from __future__ import annotations

from pathlib import Path

import git
import pytest


@pytest.fixture(autouse=True)
def git_identity(monkeypatch: pytest.MonkeyPatch) -> None:
    """Give commits a deterministic author regardless of the host git config."""
    for prefix in ("GIT_AUTHOR", "GIT_COMMITTER"):
        monkeypatch.setenv(f"{prefix}_NAME", "Test User")
        monkeypatch.setenv(f"{prefix}_EMAIL", "test@example.com")


@pytest.fixture
def bare_remote(tmp_path: Path) -> str:
    """A local bare repository standing in for the GitLab remote."""
    path = tmp_path / "remote.git"
    git.Repo.init(str(path), bare=True)
    return str(path)
