"""Workbench -- bootstrap, evolve and template projects from a catalog of kinds."""

__version__ = "0.4.0"
