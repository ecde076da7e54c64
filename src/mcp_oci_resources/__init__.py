"""
OCI Resource MCP Server.

Exposes Oracle Cloud Infrastructure resource operations (compute, storage,
network, database, monitoring, identity) as Model Context Protocol tools.
"""

__version__ = "1.0.0"
