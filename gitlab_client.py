#!/usr/bin/env python3
"""python-gitlab backed implementation of MergeRequestAPI."""

from __future__ import annotations

from typing import Any, Iterator, Optional

import gitlab

from logging_utils import Logger


class GitLabClient:
    """Thin wrapper around gitlab.Gitlab exposing only what the resolver needs."""

    def __init__(self, url: str, token: str) -> None:
        self.url = url
        self.token = token
        self.api: Optional[gitlab.Gitlab] = None

    def connect(self) -> None:
        """Create the API client and verify the token.

        Authentication and transport errors from python-gitlab propagate.
        """
        Logger.info(f"init gitlab API: {self.url}")
        self.api = gitlab.Gitlab(url=self.url, private_token=self.token)
        self.api.auth()
        Logger.security_event("GITLAB_AUTH_SUCCESS", f"authenticated against {self.url}")

    def _require_api(self) -> gitlab.Gitlab:
        if self.api is None:
            raise RuntimeError("gitlab API not initialized; call connect() first")
        return self.api

    def list_groups(self, per_page: int) -> Iterator[Any]:
        # iterator=True follows the pagination links lazily
        return self._require_api().groups.list(per_page=per_page, iterator=True)

    def list_group_projects(self, group_id: int, per_page: int) -> Iterator[Any]:
        group = self._require_api().groups.get(group_id, lazy=True)
        return group.projects.list(per_page=per_page, iterator=True)

    def create_merge_request(
        self, project_id: int, title: str, source_branch: str, target_branch: str
    ) -> Any:
        project = self._require_api().projects.get(project_id, lazy=True)
        mr = project.mergerequests.create(
            {
                "title": title,
                "source_branch": source_branch,
                "target_branch": target_branch,
            }
        )
        Logger.info(f"created merge request !{getattr(mr, 'iid', '?')}: {title}")
        return mr
