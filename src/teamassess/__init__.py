"""Assessment and visibility core for team-operations platforms."""

__version__ = "0.1.0"
