"""Report models, metadata mapping, dependency graphs and table formatting for unsafe-code usage in Cargo dependency trees."""

__version__ = "0.1.0"