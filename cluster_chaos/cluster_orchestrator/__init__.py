from .docker_nodes import DockerClusterNode, DockerNodeFactory

__all__ = ['DockerClusterNode', 'DockerNodeFactory']
