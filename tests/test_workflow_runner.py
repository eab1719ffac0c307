"""Tests for WorkflowRunner exit codes and step ordering."""

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import git
import gitlab

from config import (Config, GitLabConfig, InitMode, RepositoryConfig,
                    WorkflowConfig)
from git_repo import GitRepo
from workflow_runner import (EXIT_AUTH_ERROR, EXIT_GIT_ERROR,
                             EXIT_GITLAB_ERROR, EXIT_SUCCESS, WorkflowRunner)

MR_URL = 'git@gitlab.com:group/project.git'


def _make_config(directory: str, url: str, **workflow) -> Config:
    return Config(
        gitlab=GitLabConfig(url='https://gitlab.com', token='glpat-token'),
        repository=RepositoryConfig(
            url=url,
            directory=directory,
            ssh_key_path=None,
            init_mode=InitMode.INIT_AND_PUSH,
        ),
        workflow=WorkflowConfig(**workflow),
    )


def test_init_branch_commit_push(tmp_path: Path, bare_remote: str) -> None:
    work = tmp_path / 'work'
    work.mkdir()
    (work / '.gitignore').write_text('*.pyc\n')
    cfg = _make_config(str(work), bare_remote, branch='first change', commit_message='Add notes')

    assert WorkflowRunner(cfg).run() == EXIT_SUCCESS

    heads = {h.name for h in git.Repo(bare_remote).heads}
    assert heads == {'main', 'first-change'}


def test_missing_ssh_key_is_an_auth_error(tmp_path: Path) -> None:
    cfg = _make_config(str(tmp_path / 'work'), MR_URL)
    cfg.repository.ssh_key_path = str(tmp_path / 'missing_key')

    assert WorkflowRunner(cfg).run() == EXIT_AUTH_ERROR


def test_git_failure_maps_to_git_exit_code(tmp_path: Path) -> None:
    cfg = _make_config(str(tmp_path / 'work'), str(tmp_path / 'missing.git'))
    cfg.repository.init_mode = InitMode.CLONE

    assert WorkflowRunner(cfg).run() == EXIT_GIT_ERROR


@patch('workflow_runner.GitLabClient')
def test_gitlab_auth_failure(mock_client_cls: MagicMock, tmp_path: Path) -> None:
    mock_client_cls.return_value.connect.side_effect = (
        gitlab.exceptions.GitlabAuthenticationError('401 Unauthorized', 401)
    )
    cfg = _make_config(str(tmp_path / 'work'), MR_URL, branch='topic', mr_target='main')

    assert WorkflowRunner(cfg).run() == EXIT_AUTH_ERROR


@patch('workflow_runner.GitLabClient')
def test_unknown_merge_request_target(
    mock_client_cls: MagicMock, tmp_path: Path, bare_remote: str
) -> None:
    client = mock_client_cls.return_value
    client.list_groups.return_value = [SimpleNamespace(id=1, full_path='elsewhere')]
    work = tmp_path / 'work'
    work.mkdir()
    cfg = _make_config(
        str(work), bare_remote, branch='topic', commit_message='Change', mr_target='main'
    )

    assert WorkflowRunner(cfg).run() == EXIT_GITLAB_ERROR
    client.create_merge_request.assert_not_called()


def test_temp_dir_is_removed(tmp_path: Path, bare_remote: str, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    cfg = _make_config('work', bare_remote, use_temp_dir=True)

    assert WorkflowRunner(cfg).run() == EXIT_SUCCESS

    assert Path.cwd() == tmp_path
    assert sorted(p.name for p in tmp_path.iterdir()) == ['remote.git']


@patch('ssh_key.subprocess.run')
def test_relative_ssh_key_survives_temp_dir(
    mock_run: MagicMock, tmp_path: Path, bare_remote: str, monkeypatch
) -> None:
    monkeypatch.chdir(tmp_path)
    (tmp_path / 'id_key').write_text('key material\n')
    cfg = _make_config('work', bare_remote, use_temp_dir=True)
    cfg.repository.ssh_key_path = 'id_key'

    assert WorkflowRunner(cfg).run() == EXIT_SUCCESS

    assert mock_run.call_args.args[0][-1] == str(tmp_path / 'id_key')


def test_commit_without_branch_pushes_current_branch(
    tmp_path: Path, bare_remote: str, monkeypatch
) -> None:
    seed = tmp_path / 'seed'
    seed.mkdir()
    GitRepo(str(seed), bare_remote).clone_or_init(InitMode.INIT_AND_PUSH, 'Initial commit')

    clone_or_init = GitRepo.clone_or_init

    def clone_then_edit(self, *args, **kwargs):
        repo = clone_or_init(self, *args, **kwargs)
        Path(self.worktree, 'notes.txt').write_text('edited\n')
        return repo

    monkeypatch.setattr(GitRepo, 'clone_or_init', clone_then_edit)
    cfg = _make_config(str(tmp_path / 'clone'), bare_remote, commit_message='Change')
    cfg.repository.init_mode = InitMode.CLONE
    cfg.repository.ref = 'main'

    assert WorkflowRunner(cfg).run() == EXIT_SUCCESS

    head = git.Repo(bare_remote).heads['main'].commit
    assert head.message == 'Change'
    assert 'notes.txt' in [item.path for item in head.tree.traverse()]


def test_init_and_push_without_branch_commits_once(tmp_path: Path, bare_remote: str) -> None:
    work = tmp_path / 'work'
    work.mkdir()
    cfg = _make_config(str(work), bare_remote, commit_message='Initial import')

    assert WorkflowRunner(cfg).run() == EXIT_SUCCESS

    commits = list(git.Repo(bare_remote).iter_commits('main'))
    assert [c.message for c in commits] == ['Initial import']


@patch('workflow_runner.GitLabClient')
def test_auth_failure_during_resolution(
    mock_client_cls: MagicMock, tmp_path: Path, bare_remote: str
) -> None:
    client = mock_client_cls.return_value
    client.list_groups.side_effect = gitlab.exceptions.GitlabAuthenticationError(
        '401 Unauthorized', 401
    )
    work = tmp_path / 'work'
    work.mkdir()
    cfg = _make_config(
        str(work), bare_remote, branch='topic', commit_message='Change', mr_target='main'
    )

    assert WorkflowRunner(cfg).run() == EXIT_AUTH_ERROR
    client.create_merge_request.assert_not_called()
