"""sheetframe — Turn messy worksheets into frames with clean, unique headers."""

__version__ = "0.1.0"

PLACEHOLDER_PREFIX: str = "Unnamed_"
