"""
Application Layer - Use cases over the NSF Awards API.

Contains:
- search: QueryTranslator and SearchOrchestrator
- operations: AwardOperations (ToolOutcome-returning tool calls)
"""
