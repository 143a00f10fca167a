import io
import logging
from typing import List, Optional

from pypdf import PdfReader

logger = logging.getLogger(__name__)


def parse_pages(pages: Optional[str], page_count: int) -> List[int]:
    """
    "12-24,30" -> 0-based indexes, clamped to the document.
    Empty -> every page.
    """
    if not pages:
        return list(range(page_count))

    selected: List[int] = []
    for part in pages.split(","):
        part = part.strip()
        if not part:
            continue
        if "-" in part:
            start, end = part.split("-", 1)
            selected.extend(range(int(start) - 1, int(end)))
        else:
            selected.append(int(part) - 1)

    return [i for i in selected if 0 <= i < page_count]


def count_pages(data: bytes) -> int:
    """
    Best effort page count; 0 when the PDF cannot be read.
    """
    try:
        return len(PdfReader(io.BytesIO(data)).pages)
    except Exception as e:
        logger.warning("count_pages failed: %s", e)
        return 0


def extract_text(data: bytes, pages: Optional[str] = None) -> str:
    """
    Extract the text of a PDF held in memory.
    - data  : raw PDF bytes
    - pages : "12-24,30" -> page selection
    """
    try:
        reader = PdfReader(io.BytesIO(data))
        text_parts = []
        for i in parse_pages(pages, len(reader.pages)):
            text_parts.append(reader.pages[i].extract_text() or "")
    except Exception as e:
        logger.warning("extract_text failed: %s", e)
        return ""

    return "\n".join(text_parts)
