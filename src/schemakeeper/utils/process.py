#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
External process runner

Thin wrapper around subprocess used for framework consoles (php artisan)
and git change discovery.
"""

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Union


logger = logging.getLogger('schemakeeper.process')


@dataclass
class ProcessResult:
    """Captured result of a finished process"""
    stdout: str
    stderr: str
    exit_code: int

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


class ProcessRunner:
    """
    Run a command to completion and capture its output

    No implicit timeout: callers pass one. subprocess.TimeoutExpired and
    FileNotFoundError (missing executable) propagate to the caller.
    """

    def run(self, command: str, args: Optional[Sequence[str]] = None,
            cwd: Optional[Union[str, Path]] = None,
            timeout: Optional[float] = None) -> ProcessResult:
        argv: List[str] = [command, *(args or [])]
        logger.debug(f"Running {argv} in {cwd}")

        result = subprocess.run(
            argv,
            cwd=str(cwd) if cwd else None,
            capture_output=True,
            text=True,
            timeout=timeout
        )

        return ProcessResult(
            stdout=result.stdout or '',
            stderr=result.stderr or '',
            exit_code=result.returncode
        )


def get_changed_files(repo_path: Union[str, Path], runner: Optional[ProcessRunner] = None,
                      timeout: float = 10) -> List[str]:
    """
    Get files changed in the working tree and in the last commit

    Args:
        repo_path: Path to Git repository
        runner: Process runner (a default one is created when None)
        timeout: Per-command timeout in seconds

    Returns:
        De-duplicated list of changed file paths, empty when git is unavailable
    """
    runner = runner or ProcessRunner()
    commands = [
        ['diff', '--name-only', 'HEAD'],
        ['diff-tree', '--no-commit-id', '--name-only', '-r', 'HEAD'],
    ]

    files: List[str] = []
    for args in commands:
        try:
            result = runner.run('git', args, cwd=repo_path, timeout=timeout)
        except (OSError, subprocess.SubprocessError) as e:
            logger.warning(f"Error getting changed files from git: {e}")
            return files

        if not result.ok:
            continue
        for line in result.stdout.splitlines():
            name = line.strip()
            if name and name not in files:
                files.append(name)

    return files
