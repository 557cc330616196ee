"""
Cluster Chaos Harness - Seeded chaos testing for clustered content servers
"""
__version__ = "0.1.0"
