"""
REST client for a single cluster node
"""
import logging
import requests
from typing import Any, Dict, Optional
from ..errors import ClusterClientError
from ..interfaces import IClusterClient
from ..models import ConsistencyReport, ProjectInfo
from .payloads import node_definition, user_definition

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v2"


class MeshRestClient(IClusterClient):
    """
    Talks to one node's REST API over a requests.Session.

    Every call is bounded by the request timeout. Transport failures and HTTP
    error statuses are raised as ClusterClientError.
    """

    def __init__(self, base_url: str, node_name: str, username: str = "admin", password: str = "admin",
                 timeout: float = 30.0, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip('/')
        self.node_name = node_name
        self.username = username
        self.password = password
        self.timeout = timeout
        self.session = session or requests.Session()
        self.token: Optional[str] = None

    def login(self) -> str:
        data = self._request(
            'POST', '/auth/login',
            json={'username': self.username, 'password': self.password},
            authenticated=False
        )
        token = data.get('token')
        if not token:
            raise ClusterClientError(f"Login on {self.node_name} returned no token")
        self.token = token
        self.session.headers['Authorization'] = f"Bearer {token}"
        logger.debug(f"Logged in to {self.node_name} as {self.username}")
        return token

    def is_ready(self) -> bool:
        """Poll the readiness endpoint. Any failure counts as not ready."""
        try:
            response = self.session.get(f"{self.base_url}{API_PREFIX}/health/ready", timeout=self.timeout)
            return response.status_code == 200
        except requests.RequestException:
            return False

    def create_schema(self, definition: Dict[str, Any]) -> str:
        data = self._request('POST', '/schemas', json=definition)
        logger.info(f"Created schema {definition.get('name')} on {self.node_name}: {data['uuid']}")
        return data['uuid']

    def create_project(self, definition: Dict[str, Any]) -> ProjectInfo:
        data = self._request('POST', '/projects', json=definition)
        logger.info(f"Created project {definition.get('name')} on {self.node_name}: {data['uuid']}")
        return ProjectInfo(uuid=data['uuid'], root_node_uuid=data['rootNode']['uuid'])

    def assign_schema(self, project_name: str, schema_uuid: str) -> None:
        self._request('POST', f"/{project_name}/schemas/{schema_uuid}")

    def create_node(self, project_name: str, parent_uuid: str, schema_name: str,
                    fields: Dict[str, Any]) -> str:
        data = self._request(
            'POST', f"/{project_name}/nodes",
            json=node_definition(parent_uuid, schema_name, fields)
        )
        return data['uuid']

    def update_schema(self, schema_uuid: str, definition: Dict[str, Any]) -> None:
        self._request('POST', f"/schemas/{schema_uuid}", json=definition)

    def create_user(self, username: str, password: str) -> str:
        data = self._request('POST', '/users', json=user_definition(username, password))
        return data['uuid']

    def invoke_backup(self) -> None:
        self._request('POST', '/admin/graphdb/backup')

    def check_consistency(self) -> ConsistencyReport:
        data = self._request('GET', '/admin/consistency/check')
        return ConsistencyReport(node_name=self.node_name, inconsistencies=data.get('inconsistencies') or [])

    def _request(self, method: str, path: str, authenticated: bool = True, **kwargs) -> Dict[str, Any]:
        if authenticated and self.token is None:
            self.login()

        url = f"{self.base_url}{API_PREFIX}{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise ClusterClientError(f"{method} {path} on {self.node_name} failed: {e}") from e

        if response.status_code >= 400:
            raise ClusterClientError(
                f"{method} {path} on {self.node_name} returned {response.status_code}: {response.text}",
                status_code=response.status_code
            )

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise ClusterClientError(f"{method} {path} on {self.node_name} returned invalid JSON: {e}") from e
