"""Source-specific normalizers, one module per data provider."""

from . import geographic, goodshepherd, hdx, tech4palestine, worldbank

__all__ = ["geographic", "goodshepherd", "hdx", "tech4palestine", "worldbank"]
