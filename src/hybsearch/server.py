"""
HTTP control plane of a hybsearch server.

Two read-only endpoints are used before a run starts: ``/uptime`` and
``/pipelines``. Both return small JSON objects.
"""

from typing import Any, Dict, List, Optional

import requests
from rich.console import Console
from rich.markup import escape

from hybsearch import __version__
from hybsearch.errors import ControlPlaneError

console = Console()


class ServerApi:
    """Client for the hybsearch control-plane endpoints."""

    def __init__(
        self,
        server: str,
        timeout: float = 30,
        session: Optional[requests.Session] = None,
        debug: bool = False,
    ) -> None:
        self.server = server
        self.base_url = f"http://{server}"
        self.timeout = timeout
        self.debug = debug
        self.session = session or requests.Session()
        self.session.headers.update({
            'Accept': 'application/json',
            'User-Agent': f'hybsearch-cli/{__version__}',
        })

    def _get_json(self, endpoint: str) -> Dict[str, Any]:
        """GET ``endpoint`` and return its JSON object body."""
        url = f"{self.base_url}{endpoint}"

        if self.debug:
            console.print(f"[dim]Making GET request to: {escape(url)}[/dim]")

        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise ControlPlaneError(f"Network error: {e}") from e

        if response.status_code != 200:
            raise ControlPlaneError(f"{url} returned HTTP {response.status_code}")

        try:
            body = response.json()
        except ValueError as e:
            raise ControlPlaneError(f"{url} did not return JSON: {e}") from e

        if not isinstance(body, dict):
            raise ControlPlaneError(f"{url} returned an unexpected body: {body!r}")
        return body

    def get_uptime(self) -> float:
        """Server uptime in milliseconds."""
        body = self._get_json("/uptime")
        uptime = body.get("uptime")
        if not isinstance(uptime, (int, float)) or isinstance(uptime, bool):
            raise ControlPlaneError(f"Unexpected uptime response: {body!r}")
        return uptime

    def list_pipelines(self) -> List[str]:
        """Names of the pipelines the server can run."""
        body = self._get_json("/pipelines")
        pipelines = body.get("pipelines")
        if not isinstance(pipelines, list):
            raise ControlPlaneError(f"Unexpected pipelines response: {body!r}")
        return [name for name in pipelines if isinstance(name, str)]
