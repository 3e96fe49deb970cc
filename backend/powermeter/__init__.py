"""PowerMeter: multi-resolution energy rollups and query API."""

__version__ = "0.4.0"
