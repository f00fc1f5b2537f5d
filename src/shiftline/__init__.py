"""
shiftline - driver shift backend with a role-scoped SQL data-access layer.

- shiftline.core: errors, logging, timing, database adapters
- shiftline.db: role registry, record mapper, statement builder, executor
- shiftline.fleet: driver shift service and GPS driver registry
- shiftline.api: FastAPI application
- shiftline.cli: typer command line
"""

__version__ = "0.1.0"
