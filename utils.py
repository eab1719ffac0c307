#!/usr/bin/env python3
"""Utility functions for git-helpers."""

import time
from typing import Optional


def normalize_branch_name(name: str) -> str:
    """Replace spaces with hyphens so the name is a valid ref."""
    return name.replace(" ", "-")


def unique_branch_name(name: str, now: Optional[float] = None) -> str:
    """Append the current Unix timestamp in seconds to a normalized branch name.

    Two calls within the same second return the same name.
    """
    ts = int(time.time() if now is None else now)
    return f"{normalize_branch_name(name)}-{ts}"
