"""
Two-player Durak with lobby codes, served over WebSockets.
"""

__version__ = "0.1.0"
