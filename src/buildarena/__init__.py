"""Build & Arena game core: seeded runs, build scoring and arena settlement."""

__version__ = "0.1.0"
