"""Low-level access to the TiCS viewer.

Failures at this boundary are fatal: a bad viewer URL or token means nothing
downstream can work, so the action logger exits with a message that tells the
user which part of the configuration to check.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING
from urllib.parse import unquote

import requests

if TYPE_CHECKING:
    from ticsreview_core.config import TicsConfig
    from ticsreview_core.logger import ActionLogger
    from ticsreview_core.models import Analysis

logger = logging.getLogger(__name__)

_API_MARKER = "/api/"
_CFG_MARKER = "cfg?name="
TIMEOUT = 60


def _failure_message(status, payload: dict | None, viewer_url: str | None, action_logger: ActionLogger) -> str:
    prefix = f"HTTP request failed with status {status}."
    if status == 302:
        return f"{prefix} Please check if the given ticsConfiguration is correct (possibly http instead of https)."
    if status == 400:
        alerts = (payload or {}).get("alertMessages") or []
        if alerts and alerts[0].get("header"):
            return f"{prefix} {alerts[0]['header']}"
        return f"{prefix} Please check if the given ticsConfiguration is correct."
    if status == 401:
        base_url = get_tics_web_base_url(viewer_url or "", action_logger)
        return (
            f"{prefix} Please provide a valid TICSAUTHTOKEN in your configuration. "
            f"Check {base_url}/Administration.html#page=authToken"
        )
    if status == 404:
        return f"{prefix} Please check if the given ticsConfiguration is correct."
    return f"{prefix} Please check if your configuration is correct."


def http_request(
    url: str,
    config: TicsConfig,
    action_logger: ActionLogger,
    session: requests.Session | None = None,
):
    """GET a viewer endpoint and return the decoded JSON body.

    Any non-2xx answer, or no answer at all, ends the run via
    ``action_logger.exit``.
    """
    headers = {"X-Requested-With": "tics"}
    if config.auth_token:
        headers["Authorization"] = f"Basic {config.auth_token}"

    http = session or requests.Session()
    logger.debug("GET %s", url)
    try:
        response = http.get(url, headers=headers, allow_redirects=False, timeout=TIMEOUT)
    except requests.RequestException as e:
        logger.debug("Request to %s failed: %s", url, e)
        action_logger.exit(_failure_message(None, None, config.viewer_url, action_logger))
        return None

    if 200 <= response.status_code < 300:
        try:
            return response.json()
        except ValueError:
            # e.g. a login page of a proxy in front of the viewer
            action_logger.exit(
                f"HTTP request returned status {response.status_code} without a JSON body. "
                "Please check if the given ticsConfiguration points to the TICS Viewer."
            )
            return None

    try:
        payload = response.json()
    except ValueError:
        payload = None
    action_logger.exit(_failure_message(response.status_code, payload, config.viewer_url, action_logger))
    return None


def get_tics_web_base_url(url: str, action_logger: ActionLogger) -> str:
    """Return the viewer root of a ticsConfiguration url (everything before /api/)."""
    if _API_MARKER + _CFG_MARKER in url:
        return url.split(_API_MARKER)[0]
    action_logger.exit("Missing configuration api in the TICS Viewer URL. Please check your workflow configuration.")
    return ""


def get_item_from_url(url: str, item: str) -> str:
    """Extract ``value`` from ``Item(value)`` in a (percent-encoded) viewer url."""
    match = re.search(rf"{re.escape(item)}\((.*?)\)", unquote(url))
    if match is None:
        return ""
    return match.group(1).replace("+", " ")


def get_project_name(config: TicsConfig, url: str) -> str:
    if config.project_name == "auto":
        return get_item_from_url(url, "Project")
    return config.project_name


def cli_summary(analysis: Analysis, action_logger: ActionLogger, debug: bool = False) -> None:
    """Repeat the errors (and, in debug, the warnings) of the analysis in the log."""
    for error in analysis.error_list:
        action_logger.error(error)
    if debug:
        for warning in analysis.warning_list:
            action_logger.warning(warning)
