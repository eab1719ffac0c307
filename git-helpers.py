#!/usr/bin/env python3
"""
git-helpers - Create or clone a GitLab repository, branch, commit, push and
open a merge request in one run.

Git operations go through GitPython with SSH key authentication; merge
requests are created through the GitLab REST API (python-gitlab).

Licensed under the MIT License. See LICENSE file for details.
"""

from __future__ import annotations

import sys
from typing import NoReturn

from argument_parser import parse_arguments
from workflow_runner import WorkflowRunner

# Exit codes
EXIT_SUCCESS = 0
EXIT_EXECUTION_ERROR = 1


def main() -> NoReturn:
    if __name__ != "__main__":
        sys.exit(EXIT_EXECUTION_ERROR)

    cfg = parse_arguments()
    runner = WorkflowRunner(cfg)
    sys.exit(runner.run())


if __name__ == "__main__":
    main()
