"""
Core package init for FilterPhoto.
Exposes public modules for import in tests, GUI and scripts.
"""
__all__ = ["config", "controller", "filter_kinds", "filters", "log", "rendering"]
