#!/usr/bin/env python3
"""Run the clone/init, branch, commit, push and merge request workflow."""

from __future__ import annotations

from typing import Optional

import git
import gitlab
import requests

from config import Config, InitMode, ListOptions
from errors import (GitHelpersError, ResolutionError, SSHKeyError,
                    TargetNotFoundError)
from git_repo import GitRepo
from gitlab_client import GitLabClient
from logging_utils import Logger
from ssh_key import SSHKey
from workspace import TempDir

# Exit codes
EXIT_SUCCESS = 0
EXIT_EXECUTION_ERROR = 1
EXIT_GITLAB_ERROR = 30
EXIT_GIT_ERROR = 32
EXIT_AUTH_ERROR = 40


class WorkflowRunner:
    def __init__(self, cfg: Config) -> None:
        self.cfg = cfg
        self.temp_dir: Optional[TempDir] = None
        self.gl: Optional[GitLabClient] = None
        self.ssh_key: Optional[SSHKey] = None

    def run(self) -> int:
        try:
            # relative key paths are resolved against the caller's directory
            self.ssh_key = self._load_ssh_key()
            if self.cfg.workflow.use_temp_dir:
                self.temp_dir = TempDir.enter_new()
            repo = self._build_repo()
            self._run_steps(repo)
            Logger.info("done")
            return EXIT_SUCCESS
        except (SSHKeyError, gitlab.exceptions.GitlabAuthenticationError) as e:
            Logger.error(f"authentication error: {e}")
            return EXIT_AUTH_ERROR
        except ResolutionError as e:
            if isinstance(e.cause, gitlab.exceptions.GitlabAuthenticationError):
                Logger.error(f"authentication error: {e}")
                return EXIT_AUTH_ERROR
            Logger.error(f"gitlab error: {e}")
            return EXIT_GITLAB_ERROR
        except TargetNotFoundError as e:
            Logger.error(f"gitlab error: {e}")
            return EXIT_GITLAB_ERROR
        except (gitlab.exceptions.GitlabError, requests.RequestException) as e:
            Logger.error(f"gitlab error: {e}")
            return EXIT_GITLAB_ERROR
        except git.exc.GitError as e:
            Logger.error(f"git error: {e}")
            return EXIT_GIT_ERROR
        except GitHelpersError as e:
            Logger.error(f"workflow error: {e}")
            return EXIT_EXECUTION_ERROR
        except Exception as e:
            Logger.error(f"unexpected error: {e}")
            return EXIT_EXECUTION_ERROR
        finally:
            self._cleanup()

    def _load_ssh_key(self) -> Optional[SSHKey]:
        path = self.cfg.repository.ssh_key_path
        if not path:
            Logger.warn("no SSH key configured; using the default git credentials")
            return None
        return SSHKey.load(path)

    def _build_repo(self) -> GitRepo:
        repo_cfg = self.cfg.repository

        if self.cfg.workflow.mr_target:
            self.gl = GitLabClient(self.cfg.gitlab.url, self.cfg.gitlab.token or "")
            self.gl.connect()

        return GitRepo(
            repo_cfg.directory,
            repo_cfg.url,
            ssh_key=self.ssh_key,
            api=self.gl,
            list_options=ListOptions(per_page=self.cfg.gitlab.per_page),
            enforce_order=self.cfg.workflow.enforce_order,
        )

    def _run_steps(self, repo: GitRepo) -> None:
        wf = self.cfg.workflow
        repo.clone_or_init(
            self.cfg.repository.init_mode,
            commit_message=wf.commit_message or "Initial commit",
            ref=self.cfg.repository.ref,
            bare=self.cfg.repository.bare,
        )

        branch = None
        if wf.branch:
            branch = repo.create_branch(wf.branch, unique_suffix=wf.unique_suffix)

        # without a branch, init-and-push already used the message for its commit
        initial_only = (
            branch is None and self.cfg.repository.init_mode == InitMode.INIT_AND_PUSH
        )
        if wf.commit_message and not initial_only:
            repo.commit_and_push(wf.commit_message)

        if wf.mr_target and branch:
            title = wf.mr_title or wf.commit_message or branch
            mr = repo.open_merge_request(title, branch, wf.mr_target)
            Logger.info(f"merge request: {getattr(mr, 'web_url', mr)}")

    def _cleanup(self) -> None:
        if self.temp_dir is None:
            return
        if self.cfg.workflow.keep_temp_dir:
            Logger.info(f"keeping temporary directory: {self.temp_dir.path}")
            return
        try:
            self.temp_dir.clean()
        except OSError as e:
            Logger.warn(f"failed to clean up temporary directory: {e}")
