#!/usr/bin/env python3
"""Decomposition of SSH-style git remote URLs.

``git@gitlab.com:group/subgroup/project.git`` is split into the scheme
(``git@gitlab.com``), the namespace (``group/subgroup``) and the repository
name (``project``).
"""

from __future__ import annotations

from dataclasses import dataclass

from errors import InvalidRepoURLError

GIT_SUFFIX = ".git"


@dataclass(frozen=True)
class RepoIdentity:
    """Scheme, namespace and name of a remote repository."""
    scheme: str
    namespace: str
    name: str

    @property
    def path(self) -> str:
        """Namespace and name joined back together."""
        if not self.namespace:
            return self.name
        return f"{self.namespace}/{self.name}"


def parse_repo_url(url: str) -> RepoIdentity:
    """Split ``url`` into a RepoIdentity without ever failing.

    Malformed input degrades to empty fields: a URL without ``:`` has an
    empty scheme, a path without ``/`` has an empty namespace.
    """
    scheme, sep, path = url.partition(":")
    if not sep:
        scheme, path = "", url

    if path.endswith(GIT_SUFFIX):
        path = path[: -len(GIT_SUFFIX)]

    namespace, _, name = path.rpartition("/")
    return RepoIdentity(scheme=scheme, namespace=namespace, name=name)


def try_parse_repo_url(url: str) -> RepoIdentity:
    """Like parse_repo_url, but raise InvalidRepoURLError on incomplete input."""
    if not url:
        raise InvalidRepoURLError(url, "empty URL")
    if ":" not in url:
        raise InvalidRepoURLError(url, "missing ':' scheme separator")

    identity = parse_repo_url(url)
    if not identity.scheme:
        raise InvalidRepoURLError(url, "empty scheme")
    if not identity.name:
        raise InvalidRepoURLError(url, "empty repository name")
    if not identity.namespace:
        raise InvalidRepoURLError(url, "missing namespace")
    return identity
