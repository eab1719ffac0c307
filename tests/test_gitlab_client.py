"""Tests for the python-gitlab adapter."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from config import ListOptions
from gitlab_client import GitLabClient
from resolver import IdentifierResolver


@patch('gitlab_client.gitlab.Gitlab')
def test_connect_authenticates(mock_gitlab: MagicMock) -> None:
    client = GitLabClient('https://gitlab.example.com', 'glpat-secret')

    client.connect()

    mock_gitlab.assert_called_once_with(
        url='https://gitlab.example.com', private_token='glpat-secret'
    )
    mock_gitlab.return_value.auth.assert_called_once_with()


def test_calls_before_connect_fail() -> None:
    client = GitLabClient('https://gitlab.com', 'token')

    with pytest.raises(RuntimeError, match='not initialized'):
        client.list_groups(per_page=100)


def test_list_groups_iterates_all_pages() -> None:
    client = GitLabClient('https://gitlab.com', 'token')
    client.api = MagicMock()

    client.list_groups(per_page=50)

    client.api.groups.list.assert_called_once_with(per_page=50, iterator=True)


def test_list_group_projects_uses_lazy_group() -> None:
    client = GitLabClient('https://gitlab.com', 'token')
    client.api = MagicMock()
    group = client.api.groups.get.return_value

    client.list_group_projects(12, per_page=100)

    client.api.groups.get.assert_called_once_with(12, lazy=True)
    group.projects.list.assert_called_once_with(per_page=100, iterator=True)


def test_create_merge_request_posts_branches_and_title() -> None:
    client = GitLabClient('https://gitlab.com', 'token')
    client.api = MagicMock()
    project = client.api.projects.get.return_value

    mr = client.create_merge_request(99, 'Bump deps', 'bump-deps', 'main')

    client.api.projects.get.assert_called_once_with(99, lazy=True)
    project.mergerequests.create.assert_called_once_with(
        {'title': 'Bump deps', 'source_branch': 'bump-deps', 'target_branch': 'main'}
    )
    assert mr is project.mergerequests.create.return_value


def test_resolver_finds_group_on_a_later_page() -> None:
    client = GitLabClient('https://gitlab.com', 'token')
    client.api = MagicMock()
    pages = [
        [SimpleNamespace(id=1, full_path='alpha'), SimpleNamespace(id=2, full_path='beta')],
        [SimpleNamespace(id=3, full_path='team/tools')],
    ]
    fetched = []

    def paged_list(**kwargs):
        for number, page in enumerate(pages, start=1):
            fetched.append(number)
            yield from page

    client.api.groups.list.side_effect = paged_list
    resolver = IdentifierResolver(client, ListOptions(per_page=2))

    assert resolver.resolve_group_id('team/tools') == 3
    assert fetched == [1, 2]
    client.api.groups.list.assert_called_once_with(per_page=2, iterator=True)
