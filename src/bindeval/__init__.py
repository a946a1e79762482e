"""bindeval — binding-expression evaluation for a declarative UI runtime."""

__version__ = "0.1.0"
