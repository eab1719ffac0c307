#!/usr/bin/env python3
"""Command line argument parsing and configuration building."""

from __future__ import annotations

import argparse
import os
import sys
from typing import Optional, Sequence

from config import (DEFAULT_GITLAB_URL, DEFAULT_PER_PAGE, Config,
                    GitLabConfig, InitMode, RepositoryConfig, WorkflowConfig)
from logging_utils import Logger
from repo_url import parse_repo_url
from security import SecurityValidator

# Exit codes
EXIT_AUTH_ERROR = 40
EXIT_MISSING_ARGUMENTS = 2


def _create_argument_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser."""
    parser = argparse.ArgumentParser(
        description="Clone or init a repository, commit, push and open a GitLab merge request",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --repo-url git@gitlab.com:team/tools/app.git --ssh-key ~/.ssh/id_ed25519 \\
           --dir app --branch "bump deps" --unique-suffix --commit-msg "Bump deps" \\
           --mr-target main
  %(prog)s --repo-url git@gitlab.com:team/new-repo.git --mode init-and-push \\
           --dir new-repo --commit-msg "Initial commit"
        """,
    )
    return parser


def _add_repository_arguments(parser: argparse.ArgumentParser) -> None:
    """Add repository and git arguments to parser."""
    parser.add_argument(
        "--repo-url",
        dest="repo_url",
        required=True,
        help="Remote URL, e.g. git@gitlab.com:group/subgroup/project.git",
    )
    parser.add_argument(
        "--ssh-key",
        dest="ssh_key",
        help="Path to the SSH private key used for clone and push (or set GIT_SSH_KEY)",
    )
    parser.add_argument(
        "--dir",
        dest="directory",
        help="Local repository directory (default: repository name)",
    )
    parser.add_argument(
        "--mode",
        dest="mode",
        choices=[mode.value for mode in InitMode],
        default=InitMode.CLONE.value,
        help="How to create the local repository (default: clone)",
    )
    parser.add_argument(
        "--ref",
        dest="ref",
        help="Branch to check out when cloning",
    )
    parser.add_argument(
        "--bare",
        action="store_true",
        dest="bare",
        help="With --mode init, create a bare repository",
    )
    parser.add_argument(
        "--temp-dir",
        action="store_true",
        dest="use_temp_dir",
        help="Work inside a fresh temporary directory under the current one",
    )
    parser.add_argument(
        "--keep-temp-dir",
        action="store_true",
        dest="keep_temp_dir",
        help="Do not delete the temporary directory when done",
    )


def _add_gitlab_arguments(parser: argparse.ArgumentParser) -> None:
    """Add GitLab-related arguments to parser."""
    parser.add_argument(
        "--gl-url",
        dest="gl_url",
        help=f"Base URL of the GitLab instance (or set GITLAB_URL, default: {DEFAULT_GITLAB_URL})",
    )
    parser.add_argument(
        "--gl-token",
        dest="gl_token",
        help="GitLab API token (or set GITLAB_TOKEN env var)",
    )
    parser.add_argument(
        "--per-page",
        dest="per_page",
        type=int,
        default=DEFAULT_PER_PAGE,
        help=f"Page size for GitLab list calls (default: {DEFAULT_PER_PAGE})",
    )


def _add_workflow_arguments(parser: argparse.ArgumentParser) -> None:
    """Add workflow step arguments to parser."""
    parser.add_argument(
        "-b",
        "--branch",
        dest="branch",
        help="Branch to create; spaces become hyphens",
    )
    parser.add_argument(
        "--unique-suffix",
        action="store_true",
        dest="unique_suffix",
        help="Append the current Unix timestamp to the branch name",
    )
    parser.add_argument(
        "-m",
        "--commit-msg",
        dest="commit_message",
        help="Commit all changes with this message and push (on the new branch if -b is given)",
    )
    parser.add_argument(
        "--mr-target",
        dest="mr_target",
        help="Open a merge request from the branch into this target branch",
    )
    parser.add_argument(
        "--mr-title",
        dest="mr_title",
        help="Merge request title (default: the commit message)",
    )
    parser.add_argument(
        "--strict-order",
        action="store_true",
        dest="enforce_order",
        help="Fail instead of warning when workflow steps run out of order",
    )


def _validate_parsed_arguments(args) -> None:
    """Validate and normalize parsed arguments in place."""
    try:
        args.repo_url = SecurityValidator.validate_repo_url(args.repo_url)
        args.gl_url = SecurityValidator.validate_api_url(
            args.gl_url or os.getenv("GITLAB_URL") or DEFAULT_GITLAB_URL
        )

        ssh_key = args.ssh_key or os.getenv("GIT_SSH_KEY")
        # absolute, so a later chdir into --temp-dir does not change its meaning
        args.ssh_key = (
            os.path.abspath(SecurityValidator.validate_file_path(ssh_key)) if ssh_key else None
        )

        if args.directory:
            args.directory = SecurityValidator.validate_file_path(args.directory)

        if args.branch:
            args.branch = SecurityValidator.validate_branch_name(args.branch)
        if args.mr_target:
            args.mr_target = SecurityValidator.validate_branch_name(args.mr_target)

        if args.per_page < 1 or args.per_page > DEFAULT_PER_PAGE:
            raise ValueError(f"per-page must be between 1 and {DEFAULT_PER_PAGE}")

        if args.mr_target and not args.branch:
            raise ValueError("--mr-target requires --branch")

        Logger.security_event(
            "CONFIG_VALIDATION", "successfully validated all configuration inputs"
        )
    except ValueError as e:
        Logger.security_event(
            "CONFIG_VALIDATION_FAILED", f"configuration validation failed: {e}"
        )
        Logger.error(f"configuration validation error: {e}")
        sys.exit(EXIT_MISSING_ARGUMENTS)


def _get_token(args) -> Optional[str]:
    """Get the GitLab token; required only when a merge request is requested."""
    token = args.gl_token or os.getenv("GITLAB_TOKEN")
    if args.mr_target and not token:
        Logger.error(
            "error: gitlab token not provided (use --gl-token or GITLAB_TOKEN)"
        )
        sys.exit(EXIT_AUTH_ERROR)
    return token


def _default_directory(repo_url: str) -> str:
    return parse_repo_url(repo_url).name or "repo"


def parse_arguments(argv: Optional[Sequence[str]] = None) -> Config:
    """Parse command line arguments and return configuration object."""
    parser = _create_argument_parser()
    _add_repository_arguments(parser)
    _add_gitlab_arguments(parser)
    _add_workflow_arguments(parser)

    args = parser.parse_args(argv)
    _validate_parsed_arguments(args)
    token = _get_token(args)

    return Config(
        gitlab=GitLabConfig(
            url=args.gl_url,
            token=token,
            per_page=args.per_page,
        ),
        repository=RepositoryConfig(
            url=args.repo_url,
            directory=args.directory or _default_directory(args.repo_url),
            ssh_key_path=args.ssh_key,
            init_mode=InitMode(args.mode),
            ref=args.ref,
            bare=args.bare,
        ),
        workflow=WorkflowConfig(
            branch=args.branch,
            unique_suffix=args.unique_suffix,
            commit_message=args.commit_message,
            mr_target=args.mr_target,
            mr_title=args.mr_title,
            enforce_order=args.enforce_order,
            use_temp_dir=args.use_temp_dir,
            keep_temp_dir=args.keep_temp_dir,
        ),
    )
