#!/usr/bin/env python3
"""Clone/init, branch, commit, push and merge request workflow over GitPython."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Set

import git

from config import InitMode, ListOptions, RepoState
from errors import GitHelpersError, TargetNotFoundError, WorkflowStateError
from logging_utils import Logger
from resolver import IdentifierResolver, MergeRequestAPI
from ssh_key import SSHKey
from utils import normalize_branch_name, unique_branch_name

DEFAULT_REMOTE_NAME = "origin"
INIT_FILES = (".gitignore", "CODEOWNERS")
INIT_BRANCH = "master"
MAIN_BRANCH = "main"


@dataclass
class RepositoryContext:
    """Mutable state of one workflow run."""
    directory: str
    url: str
    ssh_key: Optional[SSHKey] = None
    repo: Optional[git.Repo] = None
    branch: Optional[str] = None
    commit_message: Optional[str] = None
    state: RepoState = RepoState.UNINITIALIZED
    pushed_branches: Set[str] = field(default_factory=set)

    @property
    def worktree(self) -> Optional[str]:
        if self.repo is None:
            return None
        return self.repo.working_tree_dir


class GitRepo:
    """Drive a single repository through clone/init, branch, commit and push.

    Git failures surface as GitPython exceptions and are not rolled back: if
    a commit succeeds and the push fails, the local commit stays. With
    ``enforce_order`` set, calling an operation before the workflow reached
    the state it needs raises WorkflowStateError; otherwise it is only
    logged.
    """

    def __init__(
        self,
        repo_dir: str,
        repo_url: str,
        ssh_key: Optional[SSHKey] = None,
        api: Optional[MergeRequestAPI] = None,
        list_options: Optional[ListOptions] = None,
        enforce_order: bool = False,
        remote_name: str = DEFAULT_REMOTE_NAME,
    ) -> None:
        self.context = RepositoryContext(
            directory=os.path.abspath(repo_dir), url=repo_url, ssh_key=ssh_key
        )
        self.api = api
        self.list_options = list_options or ListOptions()
        self.enforce_order = enforce_order
        self.remote_name = remote_name

    @property
    def state(self) -> RepoState:
        return self.context.state

    @property
    def branch(self) -> Optional[str]:
        return self.context.branch

    @property
    def repo(self) -> Optional[git.Repo]:
        return self.context.repo

    @property
    def worktree(self) -> Optional[str]:
        return self.context.worktree

    def _env(self) -> Dict[str, str]:
        if self.context.ssh_key is None:
            return {}
        return self.context.ssh_key.environment()

    def _require_repo(self) -> git.Repo:
        if self.context.repo is None:
            raise WorkflowStateError("repository not initialized; call clone_or_init() first")
        return self.context.repo

    def _check_state(self, operation: str, required: RepoState) -> None:
        if self.context.state.value >= required.value:
            return
        message = (
            f"{operation} requires state {required.name}, "
            f"repository is {self.context.state.name}"
        )
        if self.enforce_order:
            raise WorkflowStateError(message)
        Logger.warn(message)

    def clone_or_init(
        self,
        mode: InitMode = InitMode.CLONE,
        commit_message: str = "",
        ref: Optional[str] = None,
        bare: bool = False,
    ) -> git.Repo:
        if mode == InitMode.CLONE:
            repo = self._clone(ref)
        elif mode == InitMode.INIT:
            Logger.info(f"initializing repository: {self.context.directory}")
            repo = git.Repo.init(self.context.directory, bare=bare)
        else:
            repo = self._init_and_push(commit_message)

        self.context.repo = repo
        if not repo.head.is_detached:
            self.context.branch = repo.active_branch.name
        self.context.state = RepoState.READY
        return repo

    def _clone(self, ref: Optional[str]) -> git.Repo:
        Logger.info(f"cloning {self.context.url} into {self.context.directory}")
        kwargs: Dict[str, Any] = {}
        if ref:
            kwargs["branch"] = ref.replace("refs/heads/", "", 1)
        return git.Repo.clone_from(
            self.context.url, self.context.directory, env=self._env(), **kwargs
        )

    def _init_and_push(self, commit_message: str) -> git.Repo:
        """Init, commit the bootstrap files, push master to the remote's main."""
        Logger.info(f"initializing repository: {self.context.directory}")
        repo = git.Repo.init(self.context.directory, initial_branch=INIT_BRANCH)
        repo.create_remote(self.remote_name, self.context.url)

        index = repo.index
        for file_name in INIT_FILES:
            if os.path.exists(os.path.join(self.context.directory, file_name)):
                Logger.debug(f"staging file: {file_name}")
                index.add([file_name])
        index.commit(commit_message)
        self.context.commit_message = commit_message

        Logger.info(f"pushing {INIT_BRANCH} to {self.remote_name}/{MAIN_BRANCH}")
        with repo.git.custom_environment(**self._env()):
            repo.git.push(
                self.remote_name, f"refs/heads/{INIT_BRANCH}:refs/heads/{MAIN_BRANCH}"
            )
        self.context.pushed_branches.add(MAIN_BRANCH)

        repo.git.checkout("-b", MAIN_BRANCH)
        repo.delete_head(INIT_BRANCH, force=True)
        return repo

    def create_branch(self, name: str, unique_suffix: bool = False) -> str:
        self._check_state("create_branch", RepoState.READY)
        repo = self._require_repo()

        branch = unique_branch_name(name) if unique_suffix else normalize_branch_name(name)
        Logger.info(f"creating branch: {branch}")
        # checkout -b carries uncommitted changes over to the new branch
        repo.git.checkout("-b", branch)

        self.context.branch = branch
        self.context.state = RepoState.BRANCHED
        return branch

    def commit_all(self, message: str) -> str:
        self._check_state("commit_all", RepoState.BRANCHED)
        repo = self._require_repo()

        repo.git.add(A=True)
        commit = repo.index.commit(message)
        Logger.info(f"committed {commit.hexsha[:10]}: {message}")

        self.context.commit_message = message
        self.context.state = RepoState.COMMITTED
        return commit.hexsha

    def push(self) -> None:
        self._check_state("push", RepoState.COMMITTED)
        repo = self._require_repo()

        Logger.info(f"pushing to {self.remote_name}")
        with repo.git.custom_environment(**self._env()):
            repo.git.push(self.remote_name, "refs/heads/*:refs/heads/*")

        self.context.pushed_branches.update(head.name for head in repo.heads)
        self.context.state = RepoState.PUSHED

    def commit_and_push(self, message: str) -> str:
        sha = self.commit_all(message)
        self.push()
        return sha

    def open_merge_request(self, message: str, source_branch: str, target_branch: str) -> Any:
        """Resolve the project behind the remote URL and open a merge request."""
        if source_branch not in self.context.pushed_branches:
            text = f"open_merge_request: branch '{source_branch}' has not been pushed"
            if self.enforce_order:
                raise WorkflowStateError(text)
            Logger.warn(text)

        if self.api is None:
            raise GitHelpersError("no GitLab client configured for merge requests")

        resolver = IdentifierResolver(self.api, self.list_options)
        project_id = resolver.resolve_project_id(self.context.url)
        if project_id is None:
            raise TargetNotFoundError(self.context.url)

        Logger.info(
            f"opening merge request {source_branch} -> {target_branch} "
            f"in project {project_id}"
        )
        return self.api.create_merge_request(
            project_id, message, source_branch, target_branch
        )
