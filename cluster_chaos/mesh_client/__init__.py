from .rest_client import MeshRestClient

__all__ = ['MeshRestClient']
