"""
Core Utilities

Logging setup, environment access, HTTP sessions and clock helpers shared by
every layer.
"""
