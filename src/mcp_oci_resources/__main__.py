"""
OCI Resource MCP Server - Module Entry Point

Allows running the server as a Python module:
    python -m mcp_oci_resources
"""
from mcp_oci_resources.server import main

if __name__ == "__main__":
    main()
