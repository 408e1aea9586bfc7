"""modsync -- module scaffolding and route synchronization for React projects."""

__version__ = "0.1.0"
