#!/usr/bin/env python3
"""Map GitLab namespace paths and remote URLs to numeric identifiers."""

from __future__ import annotations

from typing import Any, Iterable, Optional, Protocol

import gitlab
import requests

from config import ListOptions
from errors import ResolutionError
from logging_utils import Logger
from repo_url import parse_repo_url

BACKEND_ERRORS = (gitlab.exceptions.GitlabError, requests.RequestException)


class MergeRequestAPI(Protocol):
    """The slice of the GitLab API this package needs."""

    def list_groups(self, per_page: int) -> Iterable[Any]:
        """Yield every visible group; each has ``id`` and ``full_path``."""

    def list_group_projects(self, group_id: int, per_page: int) -> Iterable[Any]:
        """Yield every project of a group; each has ``id`` and ``path``."""

    def create_merge_request(
        self, project_id: int, title: str, source_branch: str, target_branch: str
    ) -> Any:
        """Open a merge request and return the backend's object."""


class IdentifierResolver:
    """Resolve identifiers by listing and scanning GitLab collections.

    Nothing is cached: every call lists the collection again, so an id may be
    stale by the time the caller uses it. A path that does not exist resolves
    to ``None``; only API failures raise (as ResolutionError).
    """

    def __init__(self, api: MergeRequestAPI, list_options: Optional[ListOptions] = None) -> None:
        self.api = api
        self.list_options = list_options or ListOptions()

    def resolve_group_id(self, namespace_path: str) -> Optional[int]:
        Logger.debug(f"resolving group: {namespace_path}")
        try:
            for group in self.api.list_groups(per_page=self.list_options.per_page):
                if getattr(group, "full_path", None) == namespace_path:
                    Logger.debug(f"group '{namespace_path}' -> {group.id}")
                    return group.id
        except BACKEND_ERRORS as e:
            raise ResolutionError(
                f"failed to list groups while resolving '{namespace_path}': {e}", e
            ) from e

        Logger.debug(f"group not found: {namespace_path}")
        return None

    def resolve_project_id(self, url: str) -> Optional[int]:
        identity = parse_repo_url(url)
        group_id = self.resolve_group_id(identity.namespace)
        if group_id is None:
            return None

        Logger.debug(f"resolving project '{identity.name}' in group {group_id}")
        try:
            projects = self.api.list_group_projects(
                group_id, per_page=self.list_options.per_page
            )
            for project in projects:
                if getattr(project, "path", None) == identity.name:
                    Logger.debug(f"project '{identity.path}' -> {project.id}")
                    return project.id
        except BACKEND_ERRORS as e:
            raise ResolutionError(
                f"failed to list projects while resolving '{identity.path}': {e}", e
            ) from e

        Logger.debug(f"project not found: {identity.path}")
        return None
