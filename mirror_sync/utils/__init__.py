"""
Shared helpers for path handling, formatting and structured event logging.
"""
