"""ProjectHub: project management pages served in demo or real mode."""

__version__ = "1.0.0"
