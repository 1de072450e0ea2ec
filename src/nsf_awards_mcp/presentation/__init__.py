"""
Presentation Layer

MCP server exposing NSF award search to tool-calling clients.
"""
