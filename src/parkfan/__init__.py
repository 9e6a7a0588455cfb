# Park Fan Sync

__version__ = "1.0.0"
