"""SQL Server entity mapping, SQL generation, parameter binding and caching."""

__version__ = "0.2.5"