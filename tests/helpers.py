# SPDX-License-Identifier: MIT

import subprocess
from pathlib import Path

import pendulum

# 2025-03-12 is a Wednesday
NOW = pendulum.datetime(2025, 3, 12, 15, 30, tz="UTC")


def git_output(folder: Path, *arguments: str) -> str:
    result = subprocess.run(
        ["git", "-C", str(folder), *arguments],
        text=True,
        capture_output=True,
        check=True,
    )
    return result.stdout.strip()


def commit_subjects(folder: Path) -> list[str]:
    """Newest first; empty for a repository without commits."""
    result = subprocess.run(
        ["git", "-C", str(folder), "log", "--format=%s"],
        text=True,
        capture_output=True,
    )
    if result.returncode != 0:
        return []
    return result.stdout.strip().splitlines()
