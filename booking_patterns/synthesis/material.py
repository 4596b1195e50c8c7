"""Derive a placeholder material code from a free-text equipment name."""

from __future__ import annotations

import re

UNKNOWN_MATERIAL_CODE = "UNKNOWN-EQUIPMENT"

_WHITESPACE_RE = re.compile(r"\s+")
_INVALID_RE = re.compile(r"[^A-Z0-9-]")


def derive_material_code(text: str | None) -> str:
    """``"Cranial Kit W/ Drill"`` → ``"CRANIAL-KIT-W-DRILL"``.

    Only ``A-Z``, ``0-9`` and ``-`` survive.  An empty result becomes
    ``UNKNOWN-EQUIPMENT``.
    """
    code = _WHITESPACE_RE.sub("-", (text or "").strip().upper())
    code = _INVALID_RE.sub("", code)
    return code or UNKNOWN_MATERIAL_CODE
