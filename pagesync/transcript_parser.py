"""Parses edited transcripts with page break markers into page definitions."""

import logging
import os
import re
from typing import List, Tuple

from .exceptions import TranscriptFormatError
from .models import PageDefinition
from .text_utils import normalize_whitespace, truncate

logger = logging.getLogger(__name__)

PAGE_BREAK = "---"

# Optional heading on the first line of a page. Accepted spellings:
#   "# Page 1: Title"   "#Page 1:Title"   "# page 1 Title"
#   "# Page: Title"     "# Page 3"        "# PAGE"
# i.e. '#', optional blanks, 'page' (any case, not followed by a letter),
# optional number, optional colon, optional title text.
HEADING_RE = re.compile(r"^#[ \t]*page(?=[\s\d:]|$)[ \t]*(\d+)?[ \t]*:?[ \t]*(.*?)[ \t]*$", re.IGNORECASE)

DEFAULT_MIN_PAGE_CHARS = 10


class TranscriptFileParser:
    """
    Splits an edited transcript into ordered PageDefinition objects.

    Format:
        # Page 1: Introduction
        Ma journée parfaite. Je m'appelle Liam.
        ---
        # Page 2: Morning routine
        Je me réveille sans réveil.

    A line holding only '---' (surrounding blanks allowed) separates pages.
    Headings are optional; pages without one are titled "Page N". Text is
    kept character for character apart from whitespace collapsing.
    """

    def __init__(self, file_path: str = "", min_page_chars: int = DEFAULT_MIN_PAGE_CHARS):
        """
        Args:
            file_path: Path to the edited transcript (UTF-8).
            min_page_chars: Pages with fewer characters get a warning.
        """
        self.file_path = file_path
        self.min_page_chars = min_page_chars
        self.warnings: List[str] = []

    def parse(self) -> List[PageDefinition]:
        """
        Reads the transcript file and parses it.

        Raises:
            FileNotFoundError: If the transcript file does not exist.
            TranscriptFormatError: If the document has no page breaks or an empty page.
        """
        if not os.path.isfile(self.file_path):
            raise FileNotFoundError(f"Transcript file not found: {self.file_path}")

        with open(self.file_path, "r", encoding="utf-8") as f:
            document = f.read()
        logger.info(f"Parsing transcript file: {self.file_path}")
        return self.parse_text(document)

    def parse_text(self, document: str) -> List[PageDefinition]:
        """
        Parses an in-memory transcript document.

        Returns:
            Pages in document order, numbered from 1.

        Raises:
            TranscriptFormatError: If no page break is present, or a page other
                                   than a trailing one has no text.
        """
        self.warnings = []
        chunks: List[List[str]] = [[]]
        for line in document.splitlines():
            if line.strip() == PAGE_BREAK:
                chunks.append([])
            else:
                chunks[-1].append(line)

        if len(chunks) < 2:
            raise TranscriptFormatError(
                "No page breaks (---) found in transcript. "
                "Transcript must have at least one page break to define pages. "
                "Format: Text\\n---\\nMore text"
            )

        pages: List[PageDefinition] = []
        last_index = len(chunks) - 1
        for index, chunk in enumerate(chunks):
            page_number = index + 1
            raw_page = "\n".join(chunk).strip()

            if not raw_page:
                if index == last_index:
                    # trailing delimiter
                    continue
                raise TranscriptFormatError(
                    f"Page {page_number} has no content between delimiters. "
                    f"Each page must have text content."
                )

            title, body = self._parse_page_content(raw_page, page_number)
            text = normalize_whitespace(body)
            if not text:
                raise TranscriptFormatError(
                    f"Page {page_number} has no content between delimiters. "
                    f"Each page must have text content."
                )

            if len(text) < self.min_page_chars:
                self._warn(
                    f"Page {page_number} is very short ({len(text)} characters). "
                    f"Consider combining with adjacent pages."
                )

            pages.append(PageDefinition(page_number=page_number, title=title, text=text))
            logger.debug(f"Parsed page {page_number} '{title}': {truncate(text, 50)}")

        logger.info(f"Parsed {len(pages)} pages from transcript.")
        return pages

    def _parse_page_content(self, raw_page: str, page_number: int) -> Tuple[str, str]:
        """Splits an optional heading line off the page and returns (title, body)."""
        first_line, _, rest = raw_page.partition("\n")
        match = HEADING_RE.match(first_line.strip())
        if not match:
            return f"Page {page_number}", raw_page

        declared_number, title = match.groups()
        if declared_number is not None and int(declared_number) != page_number:
            self._warn(
                f"Page {page_number} heading says 'Page {declared_number}'. "
                f"Pages are numbered by position; the heading number is ignored."
            )
        return title or f"Page {page_number}", rest

    def _warn(self, message: str) -> None:
        logger.warning(message)
        self.warnings.append(message)
