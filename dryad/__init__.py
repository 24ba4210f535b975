"""A tree-walking interpreter for syntax trees of the Dryad scripting language."""

__version__ = "0.1.0"
__all__ = ["errors", "interpreter", "nodes", "operators", "values"]