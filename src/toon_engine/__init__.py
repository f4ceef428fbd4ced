"""UI-agnostic document engine for TOON structured-text editing."""

__all__ = [
    "adapters",
    "codec",
    "config",
    "diagnostics",
    "document",
    "errors",
    "projection",
    "runtime",
]

__version__ = "0.1.0"
