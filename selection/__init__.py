"""
Selection package: filtering and chronological ordering of normalized comments.
"""

from .filters import FilterOptions, apply_filters

__all__ = ["FilterOptions", "apply_filters"]
