"""
Docker-backed cluster nodes - One container per node on a shared bridge network
"""
import os
import time
import shutil
import logging
import docker
from docker.errors import APIError, DockerException, NotFound
from typing import Dict, List, Optional, Tuple
from ..errors import NodeStartupTimeout, TrafficShapingError
from ..interfaces import IClusterClient, IClusterNode, IClusterNodeFactory
from ..models import ContainerConfig
from ..mesh_client.rest_client import MeshRestClient

logger = logging.getLogger(__name__)

GRAPH_DB_PATH = "/graphdb"


class DockerClusterNode(IClusterNode):
    """A cluster node running in a Docker container"""

    def __init__(self, name: str, data_path_prefix: str, container, client: MeshRestClient,
                 config: ContainerConfig):
        self.name = name
        self.data_path_prefix = data_path_prefix
        self.container = container
        self.config = config
        self._client = client

    @property
    def client(self) -> IClusterClient:
        return self._client

    @property
    def ip_address(self) -> str:
        """Address of the container on the cluster network"""
        self.container.reload()
        networks = self.container.attrs['NetworkSettings']['Networks']
        return networks[self.config.network_name]['IPAddress']

    def await_ready(self, timeout: float) -> None:
        logger.info(f"Waiting up to {timeout:.0f}s for {self.name} to become ready")
        deadline = time.time() + timeout

        while time.time() < deadline:
            if self._client.is_ready():
                self._client.login()
                logger.info(f"Node {self.name} is ready")
                return
            time.sleep(self.config.ready_poll_interval)

        raise NodeStartupTimeout(self.name, timeout)

    def stop(self) -> None:
        logger.info(f"Stopping container {self.container.name}")
        self.container.stop()
        self._remove()

    def kill(self) -> None:
        logger.info(f"Killing container {self.container.name}")
        self.container.kill()
        self._remove()

    def drop_traffic(self, *peers: IClusterNode) -> None:
        """Drop inbound cluster traffic from the given peers, or from everyone"""
        sources = [self._peer_address(peer) for peer in peers] if peers else [None]
        for port in self.config.cluster_ports:
            for source in sources:
                self._exec(self.drop_rule(port, source))
        logger.info(f"Dropping cluster traffic on {self.name} from {sources if peers else 'all peers'}")

    def resume_traffic(self) -> None:
        self._exec(['iptables', '-F', 'INPUT'])
        logger.info(f"Resumed cluster traffic on {self.name}")

    def _peer_address(self, peer: IClusterNode) -> str:
        try:
            return peer.ip_address
        except (DockerException, KeyError) as e:
            raise TrafficShapingError(f"Cannot resolve address of {peer.name} for {self.name}: {e}") from e

    @staticmethod
    def drop_rule(port: int, source: Optional[str] = None) -> List[str]:
        rule = ['iptables', '-A', 'INPUT', '-p', 'tcp', '--dport', str(port)]
        if source:
            rule += ['-s', source]
        return rule + ['-j', 'DROP']

    def _exec(self, cmd: List[str]) -> str:
        try:
            exit_code, output = self.container.exec_run(cmd, user='root')
        except DockerException as e:
            raise TrafficShapingError(f"{' '.join(cmd)} failed on {self.name}: {e}") from e

        text = output.decode(errors='replace') if isinstance(output, bytes) else str(output)
        if exit_code != 0:
            raise TrafficShapingError(f"{' '.join(cmd)} exited with {exit_code} on {self.name}: {text.strip()}")
        return text

    def _remove(self) -> None:
        try:
            self.container.remove(force=True)
        except NotFound:
            pass


class DockerNodeFactory(IClusterNodeFactory):
    """
    Starts cluster nodes as containers.

    Each node gets a host directory under the data root, keyed by cluster id
    and data path prefix, mounted as its database directory. Restarting a node
    under the same prefix reuses its data.
    """

    def __init__(self, config: ContainerConfig, docker_client=None):
        self.config = config
        self.docker = docker_client or docker.from_env()
        self.nodes: List[DockerClusterNode] = []
        self._network = None

    def create(self, cluster_id: str, node_name: str, data_path_prefix: str,
               init_cluster: bool, write_quorum: int) -> DockerClusterNode:
        self.ensure_network()
        data_dir = self.prepare_data_dir(cluster_id, data_path_prefix, init_cluster)
        container_name = f"{cluster_id}-{node_name}"
        http_port = f"{self.config.http_port}/tcp"

        logger.info(f"Starting container {container_name} from {self.config.image}")
        container = self.docker.containers.run(
            self.config.image,
            name=container_name,
            hostname=node_name,
            environment=self.build_environment(cluster_id, node_name, init_cluster, write_quorum),
            network=self.config.network_name,
            volumes={data_dir: {'bind': GRAPH_DB_PATH, 'mode': 'rw'}},
            ports={http_port: None},
            cap_add=['NET_ADMIN'],
            detach=True
        )

        host, port = self._published_address(container, http_port)
        client = MeshRestClient(
            f"http://{host}:{port}", node_name,
            username=self.config.admin_username,
            password=self.config.admin_password,
            timeout=self.config.request_timeout
        )
        node = DockerClusterNode(node_name, data_path_prefix, container, client, self.config)
        self.nodes.append(node)
        logger.info(f"Started {node_name} with HTTP on {host}:{port}")
        return node

    def build_environment(self, cluster_id: str, node_name: str, init_cluster: bool,
                          write_quorum: int) -> Dict[str, str]:
        env = {
            'MESH_CLUSTER_ENABLED': 'true',
            'MESH_CLUSTER_NAME': cluster_id,
            'MESH_NODE_NAME': node_name,
            'MESH_CLUSTER_INIT': 'true' if init_cluster else 'false',
            'MESH_CLUSTER_WRITE_QUORUM': str(write_quorum),
            'MESH_INITIAL_ADMIN_PASSWORD': self.config.admin_password,
            'MESH_INITIAL_ADMIN_PASSWORD_FORCE_RESET': 'false',
        }
        env.update(self.config.extra_env)
        return env

    def prepare_data_dir(self, cluster_id: str, data_path_prefix: str, clear: bool) -> str:
        data_dir = os.path.join(self.config.data_root, cluster_id, data_path_prefix)
        if clear and os.path.exists(data_dir):
            logger.info(f"Clearing data directory {data_dir}")
            shutil.rmtree(data_dir)
        os.makedirs(data_dir, exist_ok=True)
        return data_dir

    def ensure_network(self):
        if self._network is None:
            try:
                self._network = self.docker.networks.get(self.config.network_name)
            except NotFound:
                logger.info(f"Creating bridge network {self.config.network_name}")
                self._network = self.docker.networks.create(self.config.network_name, driver='bridge')
        return self._network

    def cleanup(self) -> None:
        logger.info(f"Removing {len(self.nodes)} containers")
        for node in self.nodes:
            node._remove()
        self.nodes.clear()

        if self._network is not None:
            try:
                self._network.remove()
            except APIError as e:
                logger.warning(f"Failed to remove network {self.config.network_name}: {e}")
            self._network = None

    @staticmethod
    def _published_address(container, port_key: str) -> Tuple[str, str]:
        container.reload()
        bindings = container.ports.get(port_key) or []
        if not bindings:
            raise NodeStartupTimeout(container.name, 0)
        host = bindings[0].get('HostIp') or 'localhost'
        if host in ('0.0.0.0', '::'):
            host = 'localhost'
        return host, bindings[0]['HostPort']
