"""
OCI resource tools, one package per service domain.

Each domain provides a ``models`` module (call variants and creation
payloads registered in a ``CallSchema``) and a ``dispatcher`` module that
routes validated calls to the OCI SDK.
"""
