"""
Allow running the server as a package: python -m nsf_awards_mcp
"""

from __future__ import annotations

from nsf_awards_mcp.presentation.mcp_server.server import main

if __name__ == "__main__":
    main()
