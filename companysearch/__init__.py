"""Business search: ranked company-name lookup over a read-only catalog."""

__version__ = "1.0.0"
