"""Editor diagnostics derived from document errors and lint checks."""

from .lint import lint
from .markers import build_markers
from .models import Diagnostic, Severity

__all__ = ["Diagnostic", "Severity", "build_markers", "lint"]
