#!/usr/bin/env python3
"""Configuration dataclasses for git-helpers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

DEFAULT_GITLAB_URL = "https://gitlab.com"
DEFAULT_PER_PAGE = 100  # GitLab rejects anything above 100


class InitMode(Enum):
    """How the local repository is brought into existence."""
    CLONE = "clone"
    INIT = "init"
    INIT_AND_PUSH = "init-and-push"


class RepoState(Enum):
    """Progress of a single workflow run, in order."""
    UNINITIALIZED = 0
    READY = 1
    BRANCHED = 2
    COMMITTED = 3
    PUSHED = 4


@dataclass(frozen=True)
class ListOptions:
    """Pagination settings passed to GitLab list calls."""
    per_page: int = DEFAULT_PER_PAGE


@dataclass
class GitLabConfig:
    """GitLab-specific configuration."""
    url: str
    token: Optional[str]
    per_page: int = DEFAULT_PER_PAGE


@dataclass
class RepositoryConfig:
    """Where the repository lives locally and remotely."""
    url: str
    directory: str
    ssh_key_path: Optional[str]
    init_mode: InitMode = InitMode.CLONE
    ref: Optional[str] = None
    bare: bool = False


@dataclass
class WorkflowConfig:
    """Which workflow steps to run and with what inputs."""
    branch: Optional[str] = None
    unique_suffix: bool = False
    commit_message: Optional[str] = None
    mr_target: Optional[str] = None
    mr_title: Optional[str] = None
    enforce_order: bool = False
    use_temp_dir: bool = False
    keep_temp_dir: bool = False


@dataclass
class Config:
    """Main configuration for a git-helpers run."""
    gitlab: GitLabConfig
    repository: RepositoryConfig
    workflow: WorkflowConfig
