"""Utilities package for the Recipe Costing Engine (configuration, constants, validation)."""
