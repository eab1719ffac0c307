#!/usr/bin/env python3
"""SSH private key loading for authenticated clone and push."""

from __future__ import annotations

import os
import shlex
import subprocess
from typing import Dict

from errors import SSHKeyError
from logging_utils import Logger


class SSHKey:
    """A verified SSH private key on disk.

    Use :meth:`load` rather than the constructor; it checks that the file
    exists and that ``ssh-keygen`` can parse it.
    """

    def __init__(self, path: str) -> None:
        self.path = path

    @classmethod
    def load(cls, path: str) -> "SSHKey":
        path = os.path.abspath(os.path.expanduser(path))
        if not os.path.isfile(path):
            Logger.security_event("SSH_KEY_MISSING", f"no key file at {path}")
            raise SSHKeyError(f"SSH key not found: {path}")
        if not os.access(path, os.R_OK):
            raise SSHKeyError(f"SSH key not readable: {path}")

        try:
            # -y derives the public key, which fails unless the private key parses
            subprocess.run(
                ["ssh-keygen", "-y", "-P", "", "-f", path],
                check=True,
                capture_output=True,
                text=True,
                timeout=30,
            )
        except FileNotFoundError as e:
            raise SSHKeyError("ssh-keygen not found; cannot verify SSH key") from e
        except subprocess.CalledProcessError as e:
            Logger.security_event("SSH_KEY_INVALID", f"could not parse key at {path}")
            detail = (e.stderr or "").strip() or f"exit status {e.returncode}"
            raise SSHKeyError(f"SSH key could not be parsed: {path}: {detail}") from e
        except subprocess.TimeoutExpired as e:
            raise SSHKeyError(f"timed out verifying SSH key: {path}") from e

        Logger.security_event("SSH_KEY_LOADED", f"loaded key {path}")
        return cls(path)

    def git_ssh_command(self) -> str:
        # host keys are not verified
        return " ".join(
            [
                "ssh",
                "-i",
                shlex.quote(self.path),
                "-o",
                "IdentitiesOnly=yes",
                "-o",
                "StrictHostKeyChecking=no",
                "-o",
                "UserKnownHostsFile=/dev/null",
            ]
        )

    def environment(self) -> Dict[str, str]:
        return {"GIT_SSH_COMMAND": self.git_ssh_command()}
