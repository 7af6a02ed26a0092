"""repo-transfer: decide whether repositories can move between GitHub organizations."""

__version__ = "0.1.0"
