# textscan/extractors/io_image.py
from __future__ import annotations
from pathlib import Path
from typing import Dict, List, Optional, Tuple
import logging
import os

from PIL import Image, ImageOps
import pytesseract
import pypdfium2 as pdfium

logger = logging.getLogger(__name__)


def _tess_lang() -> str:
    return os.getenv("OCR_LANG", "spa")


def _tess_config() -> str:
    # LSTM, single text block
    return "--oem 1 --psm 6"


def _max_pages() -> Optional[int]:
    raw = os.getenv("MAX_PAGES")
    return int(raw) if (raw and raw.isdigit()) else None


def _clean(txt: str) -> str:
    return (txt or "").replace("\u00a0", " ")


def _render_pdf_to_images(p: Path, dpi: int = 300, max_pages: Optional[int] = None) -> List[Image.Image]:
    doc = pdfium.PdfDocument(str(p))
    try:
        n = len(doc)
        limit = min(n, max_pages) if (isinstance(max_pages, int) and max_pages > 0) else n
        imgs: List[Image.Image] = []
        for i in range(limit):
            page = doc.get_page(i)
            pil = page.render(scale=dpi / 72.0).to_pil()
            page.close()
            imgs.append(ImageOps.grayscale(pil))
        return imgs
    finally:
        doc.close()


def ocr_image_to_text(p: Path, lang: Optional[str] = None) -> Tuple[str, Dict]:
    lang = lang or _tess_lang()
    info: Dict = {"engine": "pytesseract", "lang": lang}
    try:
        with Image.open(str(p)) as img:
            gray = ImageOps.grayscale(img)
            txt = pytesseract.image_to_string(gray, lang=lang, config=_tess_config()) or ""
        return _clean(txt), info
    except (OSError, pytesseract.TesseractError) as e:
        logger.warning("OCR failed for %s: %s", p, e)
        info["error"] = f"ocr_error:{e}"
        return "", info


def pdf_ocr_text(p: Path, lang: Optional[str] = None, max_pages: Optional[int] = None) -> Tuple[str, Dict]:
    """OCR a PDF: pypdfium2 -> PIL -> Tesseract, page by page."""
    lang = lang or _tess_lang()
    info: Dict = {"engine": "pytesseract", "lang": lang, "dpi": 300}
    try:
        chunks = []
        for img in _render_pdf_to_images(p, dpi=300, max_pages=max_pages or _max_pages()):
            txt = _clean(pytesseract.image_to_string(img, lang=lang, config=_tess_config()) or "")
            if txt.strip():
                chunks.append(txt)
        info["pages"] = len(chunks)
        return "\n\n".join(chunks).strip(), info
    except (OSError, pdfium.PdfiumError, pytesseract.TesseractError) as e:
        logger.warning("PDF OCR failed for %s: %s", p, e)
        info["error"] = f"ocr_error:{e}"
        return "", info


def ocr_file(p: Path, lang: Optional[str] = None, max_pages: Optional[int] = None) -> Tuple[str, Dict]:
    if p.suffix.lower() == ".pdf":
        return pdf_ocr_text(p, lang=lang, max_pages=max_pages)
    return ocr_image_to_text(p, lang=lang)
