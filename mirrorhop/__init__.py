"""
mirrorhop - catalog movie/TV titles from download listing sites and resolve
their mirror buttons into directly playable media links.
"""

__version__ = "1.0.0"
