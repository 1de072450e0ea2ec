"""
NSF Awards MCP Server

- instructions.py: SERVER_INSTRUCTIONS for AI agents
- tool_registry.py: tool catalogue and registration
- tools/: tool implementations
- server.py: create_server() / main()
"""

from .server import create_server, main

__all__ = ["create_server", "main"]
