"""Grid based vector race simulator with an automated path finder."""

__version__ = "0.3.0"
