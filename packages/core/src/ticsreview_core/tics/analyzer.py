"""Run the TiCS client on the files of a pull request."""

from __future__ import annotations

import os
import re
import shlex
import subprocess
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING, Iterable

from ticsreview_core.models import Analysis, ChangedFile

if TYPE_CHECKING:
    from ticsreview_core.config import TicsConfig
    from ticsreview_core.logger import ActionLogger

FILE_LIST_NAME = "changedFiles.txt"

_ERROR_RE = re.compile(r"\[ERROR.*")
_WARNING_RE = re.compile(r"\[WARNING.*")
_EXPLORER_RE = re.compile(r"https?://\S*Explorer\S*")


def write_file_list(changed_files: Iterable[ChangedFile], tmp_dir: str | None = None) -> Path:
    """Write the paths the client should analyze, one per line. Removed files are left out."""
    directory = Path(tmp_dir or tempfile.gettempdir())
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / FILE_LIST_NAME
    names = [f.filename for f in changed_files if f.status != "removed"]
    path.write_text("".join(f"{name}\n" for name in names), encoding="utf-8")
    return path


def build_tics_command(config: TicsConfig, file_list: Path) -> list[str]:
    command = [
        config.tics_command,
        f"@{file_list}",
        "-viewer",
        "-project",
        config.project_name,
        "-calc",
        config.calc,
    ]
    if config.tmp_dir:
        command += ["-tmpdir", config.tmp_dir]
    command += shlex.split(config.extend_flags)
    return command


def parse_output(output: str, returncode: int) -> Analysis:
    explorer = _EXPLORER_RE.search(output)
    return Analysis(
        completed=returncode == 0,
        status_code=returncode,
        error_list=_ERROR_RE.findall(output),
        warning_list=_WARNING_RE.findall(output),
        explorer_url=explorer.group(0).rstrip(".,") if explorer else None,
    )


def run_analysis(config: TicsConfig, file_list: Path, action_logger: ActionLogger) -> Analysis:
    """Run the client and collect its errors, warnings and Explorer link."""
    command = build_tics_command(config, file_list)
    action_logger.header("Analyzing changed files with TiCS.")
    action_logger.debug(f"Running: {shlex.join(command)}")

    env = dict(os.environ)
    if config.auth_token:
        env["TICSAUTHTOKEN"] = config.auth_token

    try:
        result = subprocess.run(command, capture_output=True, text=True, env=env)
    except FileNotFoundError:
        message = f"Could not run '{config.tics_command}'. Is the TiCS client installed and on the PATH?"
        return Analysis(completed=False, status_code=-1, error_list=[message])

    output = (result.stdout or "") + (result.stderr or "")
    for line in output.splitlines():
        action_logger.info(line)
    return parse_output(output, result.returncode)
