"""
Shared utilities: exceptions, date reconciliation, record shape normalization.
"""
