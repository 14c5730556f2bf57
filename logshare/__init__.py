"""
logshare - streaming client for the Enterprise Log Share API
"""

__version__ = "1.0.0"
