"""Unicode font lookup for ReportLab exports."""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)

FONT_NAME = "TailorUnicode"

_FALLBACK_WARNING_EMITTED = False


def find_unicode_ttf() -> str | None:
    """Return the first installed TrueType font that covers currency symbols."""
    candidates = [
        "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
        "/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf",
        "/usr/share/fonts/truetype/noto/NotoSans-Regular.ttf",
        "/System/Library/Fonts/Supplemental/Arial Unicode.ttf",
        r"C:\\Windows\\Fonts\\arial.ttf",
    ]
    for candidate in candidates:
        if Path(candidate).exists():
            return candidate
    return None


def register_pdf_font() -> str:
    """Register the Unicode font once and return the name to use in styles."""
    global _FALLBACK_WARNING_EMITTED

    font_path = find_unicode_ttf()
    if font_path:
        from reportlab.pdfbase import pdfmetrics
        from reportlab.pdfbase.ttfonts import TTFont

        if FONT_NAME not in pdfmetrics.getRegisteredFontNames():
            pdfmetrics.registerFont(TTFont(FONT_NAME, font_path))
        return FONT_NAME

    if not _FALLBACK_WARNING_EMITTED:
        logger.warning("[EXPORT] No Unicode TTF font found; falling back to Helvetica.")
        _FALLBACK_WARNING_EMITTED = True
    return "Helvetica"
