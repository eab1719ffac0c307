#!/usr/bin/env python3
"""Input validation and log redaction for git-helpers."""

import os
import re
from typing import List, Optional


class SecurityValidator:
    """Validation helpers for user supplied URLs, paths and ref names."""

    MAX_URL_LENGTH = 2048
    MAX_BRANCH_LENGTH = 200
    MAX_PATH_LENGTH = 500

    # user@host:path, the scp-like syntax git uses for SSH remotes
    SCP_LIKE_PATTERN = re.compile(r"^[A-Za-z0-9._-]+@[A-Za-z0-9.-]+:[^\s]+$")
    UNSAFE_BRANCH_CHARS = re.compile(r"[\x00-\x20~^:?*\[\\\x7f]")

    @classmethod
    def validate_repo_url(cls, url: str) -> str:
        """Validate a git remote URL (scp-like SSH, ssh://, https:// or a local path)."""
        if not url or not isinstance(url, str):
            raise ValueError("Repository URL must be a non-empty string")

        if len(url) > cls.MAX_URL_LENGTH:
            raise ValueError(f"URL exceeds maximum length of {cls.MAX_URL_LENGTH}")

        if "\x00" in url or any(ord(c) < 32 for c in url):
            raise ValueError("URL contains null bytes or control characters")

        if url.startswith(("ssh://", "https://", "http://", "file://", "/")):
            return url
        if cls.SCP_LIKE_PATTERN.match(url):
            return url
        raise ValueError(
            "URL must be an SSH (user@host:path), ssh://, https:// or local path remote"
        )

    @classmethod
    def validate_api_url(cls, url: str, allowed_schemes: Optional[List[str]] = None) -> str:
        """Validate the base URL of a GitLab instance."""
        if not url or not isinstance(url, str):
            raise ValueError("API URL must be a non-empty string")

        if len(url) > cls.MAX_URL_LENGTH:
            raise ValueError(f"URL exceeds maximum length of {cls.MAX_URL_LENGTH}")

        schemes = allowed_schemes or ["https", "http"]
        scheme = url.split("://")[0].lower() if "://" in url else ""
        if scheme not in schemes:
            raise ValueError(f"URL scheme '{scheme}' not in allowed schemes: {schemes}")

        return url.rstrip("/")

    @classmethod
    def validate_branch_name(cls, name: str) -> str:
        """Reject names git would refuse as a branch (see git-check-ref-format)."""
        if not name or not isinstance(name, str):
            raise ValueError("Branch name must be a non-empty string")

        if len(name) > cls.MAX_BRANCH_LENGTH:
            raise ValueError(
                f"Branch name exceeds maximum length of {cls.MAX_BRANCH_LENGTH}"
            )

        # spaces are turned into hyphens later on, so only check the rest
        if cls.UNSAFE_BRANCH_CHARS.search(name.replace(" ", "-")):
            raise ValueError("Branch name contains characters git does not allow")

        if ".." in name or "@{" in name or "//" in name:
            raise ValueError("Branch name contains an invalid sequence")

        if name.startswith(("-", "/", ".")) or name.endswith(("/", ".", ".lock")):
            raise ValueError("Branch name has an invalid prefix or suffix")

        return name

    @classmethod
    def validate_file_path(cls, path: str) -> str:
        """Validate a local file or directory path."""
        if not path or not isinstance(path, str):
            raise ValueError("File path must be a non-empty string")

        if len(path) > cls.MAX_PATH_LENGTH:
            raise ValueError(
                f"File path exceeds maximum length of {cls.MAX_PATH_LENGTH}"
            )

        if "\x00" in path:
            raise ValueError("File path contains null bytes")

        return os.path.normpath(os.path.expanduser(path))

    @classmethod
    def sanitize_for_logging(cls, message: str) -> str:
        """Redact tokens and embedded credentials from a log message."""
        if not message:
            return message

        patterns = [
            (r"https?://[^:/@\s]+:[^@\s]+@", "https://[REDACTED]@"),
            (r"private[_-]token\s*[=:]\s*[^\s&]+", "private_token=[REDACTED]"),
            (r"token\s*[=:]\s*[^\s&]+", "token=[REDACTED]"),
            (r"password\s*[=:]\s*[^\s&]+", "password=[REDACTED]"),
            (r"glpat[-_][A-Za-z0-9_-]+", "[GITLAB_TOKEN_REDACTED]"),
            (r"gldt[-_][A-Za-z0-9_-]+", "[GITLAB_TOKEN_REDACTED]"),
            (r"-----BEGIN [A-Z ]*PRIVATE KEY-----", "[PRIVATE_KEY_REDACTED]"),
        ]

        sanitized = message
        for pattern, replacement in patterns:
            sanitized = re.sub(pattern, replacement, sanitized, flags=re.IGNORECASE)

        return sanitized
