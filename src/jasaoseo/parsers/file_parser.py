"""Turn attached files into plain text for the pipeline input.

PDF and DOCX are read locally; images go through Claude Vision OCR.
"""

from __future__ import annotations

import logging
import re
from io import BytesIO
from pathlib import Path

from jasaoseo.clients.llm_client import LLMClient
from jasaoseo.models.inputs import AttachedFile, FileCategory

logger = logging.getLogger(__name__)

TEXT_SUFFIXES = (".txt", ".md")
DOCUMENT_SUFFIXES = (".pdf", ".docx") + TEXT_SUFFIXES

IMAGE_MEDIA_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".webp": "image/webp",
}


def clean_text(text: str) -> str:
    """Strip BOM/zero-width artifacts, trailing spaces and runs of blank lines."""
    text = text.lstrip("\ufeff")
    text = re.sub(r"[\u200b\u200c\u200d\u00ad\u2060\ufeff]", "", text)
    text = "\n".join(line.rstrip() for line in text.splitlines())
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def extract_text(file_bytes: bytes, filename: str) -> str:
    """Extract text from a PDF, DOCX, TXT or MD file."""
    suffix = Path(filename).suffix.lower()
    if suffix == ".pdf":
        return clean_text(_pdf_text(file_bytes))
    if suffix == ".docx":
        return clean_text(_docx_text(file_bytes))
    if suffix in TEXT_SUFFIXES:
        return clean_text(file_bytes.decode("utf-8", errors="replace"))
    raise ValueError(f"Unsupported file format: {suffix}")


async def read_attachment(
    file_bytes: bytes,
    filename: str,
    category: FileCategory,
    llm: LLMClient | None = None,
) -> AttachedFile:
    """Build an AttachedFile, running OCR for images."""
    suffix = Path(filename).suffix.lower()
    if suffix in IMAGE_MEDIA_TYPES:
        if llm is None:
            raise ValueError("이미지 파일의 텍스트 추출에는 LLM 클라이언트가 필요합니다.")
        logger.info("Running OCR on %s", filename)
        content = await llm.extract_text_from_image(file_bytes, IMAGE_MEDIA_TYPES[suffix])
    else:
        content = extract_text(file_bytes, filename)

    if not content.strip():
        raise ValueError(f"파일({filename})에서 텍스트를 찾을 수 없습니다.")
    return AttachedFile(name=filename, content=content, category=category)


def _pdf_text(file_bytes: bytes) -> str:
    import fitz  # pymupdf

    doc = fitz.open(stream=file_bytes, filetype="pdf")
    try:
        return "\n".join(page.get_text() for page in doc)
    finally:
        doc.close()


def _docx_text(file_bytes: bytes) -> str:
    from docx import Document

    doc = Document(BytesIO(file_bytes))
    return "\n".join(p.text for p in doc.paragraphs if p.text.strip())
