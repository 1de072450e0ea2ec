"""
Infrastructure Layer - External service integrations.

Contains:
- nsf: NSF Awards API gateway and response parsing
"""
