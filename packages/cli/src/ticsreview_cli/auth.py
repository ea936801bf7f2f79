"""Credential resolution for the GitHub and TiCS APIs.

Resolution order for the GitHub token (stops at first success):
  1. GITHUB_TOKEN environment variable (set by every GitHub Actions workflow)
  2. `gh auth token` (GitHub CLI session, for local runs)

The TiCS token only comes from TICSAUTHTOKEN; the TiCS client reads the
same variable, so there is nothing to fall back to.
"""

from __future__ import annotations

import logging
import os
import subprocess
from typing import Mapping

logger = logging.getLogger(__name__)


def _gh_cli_token() -> str | None:
    try:
        result = subprocess.run(["gh", "auth", "token"], capture_output=True, text=True, timeout=5)
    except (FileNotFoundError, subprocess.TimeoutExpired):
        return None
    if result.returncode != 0:
        return None
    token = result.stdout.strip()
    if token:
        logger.debug("Resolved GitHub token via gh CLI session.")
    return token or None


def resolve_github_token(environ: Mapping[str, str] | None = None) -> str | None:
    """Return a GitHub token or None. Never raises."""
    env = os.environ if environ is None else environ
    return env.get("GITHUB_TOKEN") or _gh_cli_token()


def resolve_tics_token(environ: Mapping[str, str] | None = None) -> str | None:
    env = os.environ if environ is None else environ
    return env.get("TICSAUTHTOKEN") or None
