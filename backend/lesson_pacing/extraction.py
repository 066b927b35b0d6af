import logging
from io import BytesIO

from pypdf import PdfReader
from pypdf.errors import PdfReadError

logger = logging.getLogger(__name__)

TEXT_EXTENSIONS = (".txt", ".md")
IMAGE_EXTENSIONS = (".png", ".jpg", ".jpeg", ".gif", ".bmp", ".tif", ".tiff", ".webp")


class UnsupportedSyllabusFile(Exception):
    pass


def clean_extracted_text(text: str) -> str:
    """Trim every line and drop blank ones; the teacher edits the result into units and chapters."""
    return "\n".join(line.strip() for line in text.splitlines() if line.strip())


def extract_pdf_text(content: bytes) -> str:
    try:
        reader = PdfReader(BytesIO(content))
        pages = [page.extract_text() or "" for page in reader.pages]
    except PdfReadError as exc:
        raise UnsupportedSyllabusFile(f"Could not read PDF: {exc}") from exc
    return "\n".join(pages)


def decode_text(content: bytes) -> str:
    try:
        return content.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise UnsupportedSyllabusFile(f"Text file is not valid UTF-8 (byte {exc.start}).") from exc


def extract_syllabus_text(filename: str | None, content_type: str | None, content: bytes) -> str:
    name = (filename or "").lower()
    content_type = content_type or ""
    if content_type == "application/pdf" or name.endswith(".pdf"):
        raw = extract_pdf_text(content)
    elif name.endswith(TEXT_EXTENSIONS) or content_type.startswith("text/"):
        raw = decode_text(content)
    elif name.endswith(IMAGE_EXTENSIONS) or content_type.startswith("image/"):
        raise UnsupportedSyllabusFile(
            "Image syllabus files cannot be read because OCR is not available. Please upload a PDF or text file."
        )
    else:
        raise UnsupportedSyllabusFile("Unsupported file type. Please upload a PDF or text file.")

    text = clean_extracted_text(raw)
    logger.info(f"Extracted {len(text.splitlines())} syllabus lines from {filename}")
    return text
