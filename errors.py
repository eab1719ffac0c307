#!/usr/bin/env python3
"""Exception types raised by git-helpers."""

from __future__ import annotations

from typing import Optional


class GitHelpersError(Exception):
    """Base class for errors raised by this package."""


class InvalidRepoURLError(GitHelpersError, ValueError):
    """A remote URL could not be decomposed into scheme, namespace and name."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"invalid repository URL '{url}': {reason}")
        self.url = url
        self.reason = reason


class ResolutionError(GitHelpersError):
    """The GitLab API failed while resolving a group or project identifier.

    This is distinct from a miss: a path that simply does not exist resolves
    to ``None`` and never raises.
    """

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.cause = cause


class TargetNotFoundError(GitHelpersError):
    """The project a merge request should target does not exist."""

    def __init__(self, url: str) -> None:
        super().__init__(f"target repository not found: {url}")
        self.url = url


class WorkflowStateError(GitHelpersError):
    """An operation was called before the workflow reached the required state."""


class SSHKeyError(GitHelpersError):
    """The SSH private key could not be read or parsed."""
