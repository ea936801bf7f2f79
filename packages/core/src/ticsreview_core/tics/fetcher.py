from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from urllib.parse import urlencode

import requests

from ticsreview_core.models import Annotation, QualityGate
from ticsreview_core.tics.api_helper import get_item_from_url, get_project_name, get_tics_web_base_url, http_request

if TYPE_CHECKING:
    from ticsreview_core.config import TicsConfig
    from ticsreview_core.logger import ActionLogger

logger = logging.getLogger(__name__)


class ViewerClient:
    """Reads analysis results of one run from the TiCS viewer.

    ``explorer_url`` is the link the TiCS client prints after a run; it
    carries the project and the ClientData token that scopes the viewer
    queries to the files of this analysis.
    """

    def __init__(self, config: TicsConfig, action_logger: ActionLogger, session: requests.Session | None = None):
        self.config = config
        self.action_logger = action_logger
        self.session = session or requests.Session()
        self.base_url = get_tics_web_base_url(config.viewer_url or "", action_logger)

    def _get(self, url: str):
        return http_request(url, self.config, self.action_logger, session=self.session)

    def get_quality_gate_url(self, explorer_url: str) -> str:
        params = {"project": get_project_name(self.config, explorer_url)}
        if self.config.branch_name:
            params["branch"] = self.config.branch_name
        params["fields"] = "details,annotationsApiV1Links"
        client_data = get_item_from_url(explorer_url, "ClientData")
        if client_data:
            params["cdt"] = client_data
        return f"{self.base_url}/api/public/v1/QualityGateStatus?{urlencode(params)}"

    def get_quality_gate(self, explorer_url: str) -> QualityGate:
        self.action_logger.header("Retrieving the quality gate status.")
        data = self._get(self.get_quality_gate_url(explorer_url)) or {}
        quality_gate = QualityGate.from_api(data)
        self.action_logger.debug(f"Quality gate {'passed' if quality_gate.passed else 'failed'}: {quality_gate.message}")
        return quality_gate

    def get_annotations(self, quality_gate: QualityGate) -> list[Annotation]:
        """Fetch the annotations behind every link the quality gate returned."""
        self.action_logger.header("Retrieving annotations.")
        annotations: list[Annotation] = []
        for link in quality_gate.annotation_urls:
            data = self._get(f"{self.base_url}/api/{link}") or {}
            annotations.extend(Annotation.from_api(a) for a in data.get("data") or [])
        self.action_logger.info(f"Retrieved {len(annotations)} annotation(s).")
        return annotations

    def get_analyzed_files_url(self, explorer_url: str) -> str:
        project = get_project_name(self.config, explorer_url)
        filters = [
            f"ClientData({get_item_from_url(explorer_url, 'ClientData')})",
            f"Project({project})",
            "Window(-1)",
            "CodeType(Set(production,test,external,generated))",
            "File()",
        ]
        if self.config.branch_name:
            filters.insert(2, f"Branch({self.config.branch_name})")
        return f"{self.base_url}/api/public/v1/Measure?{urlencode({'metrics': 'filePath', 'filters': ','.join(filters)})}"

    def get_analyzed_files(self, explorer_url: str) -> list[str]:
        self.action_logger.header("Retrieving analyzed files.")
        data = self._get(self.get_analyzed_files_url(explorer_url)) or {}
        files = [item.get("formattedValue", "") for item in data.get("data") or []]
        self.action_logger.info(f"Retrieved {len(files)} analyzed file(s).")
        return files
