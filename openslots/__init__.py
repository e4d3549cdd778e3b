"""
openslots - find open replacement-session windows for a school site.
"""

__version__ = "0.1.0"
