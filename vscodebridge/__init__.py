"""
vscodebridge - correlated request/response channel between an MCP server and an editor host.
"""

__version__ = "0.1.0"
