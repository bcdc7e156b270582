"""Supplemental interview text for the chatbot, loaded once per process."""
from __future__ import annotations

from pathlib import Path

from planner.config import SUPPLEMENTALS_DIR, load_settings
from planner.log import get_logger

log = get_logger(__name__)


def _read_pdf(path: Path) -> str:
    from pypdf import PdfReader

    reader = PdfReader(str(path))
    return "\n".join((page.extract_text() or "") for page in reader.pages)


class SupplementalText:
    """Lazily loaded text: PDF, then plain-text file, then empty string.

    Once loaded the value is fixed until ``reset()``.
    """

    def __init__(self, directory: Path | None = None, basename: str | None = None) -> None:
        self.directory = directory or SUPPLEMENTALS_DIR
        self.basename = basename or load_settings().get("supplemental_basename", "Supplemental Interview")
        self._text: str | None = None

    @property
    def is_loaded(self) -> bool:
        return self._text is not None

    @property
    def pdf_path(self) -> Path:
        return self.directory / f"{self.basename}.pdf"

    @property
    def txt_path(self) -> Path:
        return self.directory / f"{self.basename}.txt"

    def _load(self) -> str:
        if self.pdf_path.exists():
            try:
                text = _read_pdf(self.pdf_path)
                log.info("Loaded supplemental PDF (%d chars)", len(text))
                return text
            except Exception as exc:
                log.warning("Could not read supplemental PDF (%s), trying text file", exc)

        if self.txt_path.exists():
            try:
                text = self.txt_path.read_text(encoding="utf-8", errors="ignore")
                log.info("Loaded supplemental text file (%d chars)", len(text))
                return text
            except OSError as exc:
                log.warning("Could not read supplemental text file (%s)", exc)

        log.warning("Supplemental info unavailable, using CV information only")
        return ""

    def get(self) -> str:
        if self._text is None:
            self._text = self._load()
        return self._text

    def reset(self) -> None:
        self._text = None


_default: SupplementalText | None = None


def get_supplemental() -> SupplementalText:
    global _default
    if _default is None:
        _default = SupplementalText()
    return _default
