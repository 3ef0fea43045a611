"""
Shared helpers: formatting and structured logging.
"""
