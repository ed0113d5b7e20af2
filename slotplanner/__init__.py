"""
slotplanner - fit flexible activities into free calendar time.
"""

__version__ = "0.1.0"
