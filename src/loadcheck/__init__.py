"""loadcheck - log top CPU consumers when the load average is too high."""

__version__ = "1.6.0"
