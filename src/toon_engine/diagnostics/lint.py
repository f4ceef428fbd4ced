"""Advisory line checks for TOON text.

These run independently of decoding: they flag layout problems the decoder
may tolerate and keep reporting while the document is invalid.
"""

from __future__ import annotations

import re
from typing import List

from .models import Diagnostic, Severity

ARRAY_HEADER_RE = re.compile(r"^(\w+)\[(\d+)\](\{([^}]*)\})?:?\s*$")
PLAIN_KEY_RE = re.compile(r"^[\w.]+$")
QUOTED_KEY_RE = re.compile(r'^".*"$')
HEADER_KEY_RE = re.compile(r"^[\w.]*\[#?\d+[^\]]*\](\{[^}]*\})?$")


def lint(text: str, *, indent_size: int = 2) -> List[Diagnostic]:
    markers: List[Diagnostic] = []
    for index, line in enumerate(text.split("\n")):
        number = index + 1
        trimmed = line.lstrip()
        if not trimmed.strip() or trimmed.startswith("#"):
            continue
        leading = len(line) - len(trimmed)

        if leading % indent_size:
            markers.append(
                Diagnostic(
                    severity=Severity.WARNING,
                    line=number,
                    column=1,
                    end_line=number,
                    end_column=leading + 1,
                    message=f"Indentation should be a multiple of {indent_size} spaces",
                )
            )

        if ARRAY_HEADER_RE.match(trimmed) and not trimmed.rstrip().endswith(":"):
            markers.append(
                Diagnostic(
                    severity=Severity.ERROR,
                    line=number,
                    column=leading + 1,
                    end_line=number,
                    end_column=len(line) + 1,
                    message="Array header must end with colon (:)",
                )
            )

        stripped = trimmed.rstrip()
        if ":" in stripped and not stripped.endswith(":") and not stripped.startswith("-"):
            colon = stripped.index(":")
            key = stripped[:colon].strip()
            if (
                key
                and not PLAIN_KEY_RE.match(key)
                and not QUOTED_KEY_RE.match(key)
                and not HEADER_KEY_RE.match(key)
            ):
                markers.append(
                    Diagnostic(
                        severity=Severity.WARNING,
                        line=number,
                        column=leading + 1,
                        end_line=number,
                        end_column=leading + colon + 1,
                        message="Key should be alphanumeric (use quotes for special characters)",
                    )
                )
    return markers


__all__ = ["lint"]
