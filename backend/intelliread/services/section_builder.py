"""Section detection and grouping of page content"""
import math
import re
import logging
from typing import List, Optional
from ..models.document import Page, Section
from ..utils.helpers import generate_section_id

logger = logging.getLogger(__name__)

HEADING_PATTERNS = [
    re.compile(r'^(?:Chapter|Section|Part)\s+\d+\s*[:.]', re.IGNORECASE),
    re.compile(r'^\d+\.\d*\s+[A-Z]'),
    re.compile(r'^[A-Z][A-Z\s]{4,}$'),
]
HEADING_VOCABULARY = {"introduction", "conclusion", "summary", "abstract"}
MAX_HEADING_LENGTH = 100

BULLET_KEYWORDS = [
    'important', 'key', 'main', 'conclusion', 'result', 'finding',
    'must', 'should', 'shows', 'displays', 'illustrates',
]
MAX_BULLETS = 5
MAX_BULLET_LENGTH = 200

PREAMBLE_TITLE = "Introduction"
EMPTY_DOCUMENT_CONTENT = "No content extracted from this document."
FALLBACK_GROUPS = 5


def is_heading(line: str) -> bool:
    """Check whether a stripped line looks like a section heading"""
    if not line or len(line) > MAX_HEADING_LENGTH:
        return False
    if line.lower() in HEADING_VOCABULARY:
        return True
    return any(pattern.match(line) for pattern in HEADING_PATTERNS)


def extract_bullet_points(text: str) -> List[str]:
    """
    Pick up to five key sentences for section display

    The first three qualifying sentences are always taken, later ones only
    when they contain one of the keywords.
    """
    if not text:
        return ['No text content available']

    sentences = [s.strip() for s in re.split(r'[.!?]+', text) if len(s.strip()) > 20]
    bullets: List[str] = []

    for idx, sentence in enumerate(sentences):
        if len(bullets) >= MAX_BULLETS:
            break
        lowered = sentence.lower()
        if idx < 3 or any(keyword in lowered for keyword in BULLET_KEYWORDS):
            bullets.append(sentence[:MAX_BULLET_LENGTH])

    return bullets or [text[:MAX_BULLET_LENGTH].strip() or 'Content available']


class _SectionDraft:
    """Section under construction during the line walk"""

    def __init__(self, title: str, start_page: Optional[int] = None, image_derived: bool = False):
        self.title = title
        self.start_page = start_page
        self.end_page = start_page
        self.lines: List[str] = []
        self.image_derived = image_derived
        self.bullet_points: Optional[List[str]] = None

    def append(self, line: str, page_number: int):
        if self.start_page is None:
            self.start_page = page_number
        self.end_page = page_number
        self.lines.append(line)

    @property
    def content(self) -> str:
        return re.sub(r'\n{3,}', '\n\n', "\n".join(self.lines)).strip()


class SectionBuilder:
    """Group classified pages into titled sections"""

    def build(self, pages: List[Page], document_id: str = "") -> List[Section]:
        """
        Build the ordered section list for a document

        Args:
            pages: Classified (and image-resolved) pages in page order
            document_id: Owning document

        Returns:
            Sections sorted by start page; never empty
        """
        text_pages = [p for p in pages if not p.is_image_only]
        image_pages = [p for p in pages if p.is_image_only]

        drafts = self._heading_sections(text_pages)
        if drafts is None:
            drafts = self._paragraph_sections(text_pages)
        drafts.extend(self._visual_sections(image_pages))

        if not drafts:
            drafts = [self._placeholder_section(pages)]

        drafts.sort(key=lambda d: d.start_page)

        sections = []
        for order, draft in enumerate(drafts):
            content = draft.content or EMPTY_DOCUMENT_CONTENT
            sections.append(Section(
                id=generate_section_id(document_id, order),
                document_id=document_id,
                title=draft.title,
                content=content,
                start_page=draft.start_page,
                end_page=draft.end_page,
                order=order,
                is_image_derived=draft.image_derived,
                bullet_points=draft.bullet_points if draft.bullet_points is not None
                else extract_bullet_points(content),
            ))

        logger.info(f"Built {len(sections)} sections")
        return sections

    def _heading_sections(self, text_pages: List[Page]) -> Optional[List[_SectionDraft]]:
        """Walk lines in page order; None when no heading is found"""
        preamble = _SectionDraft(PREAMBLE_TITLE)
        current: Optional[_SectionDraft] = None
        drafts: List[_SectionDraft] = []

        for page in text_pages:
            for line in page.text.split("\n"):
                stripped = line.strip()
                if is_heading(stripped):
                    if current is not None:
                        drafts.append(current)
                    current = _SectionDraft(stripped, start_page=page.page_number)
                else:
                    (current or preamble).append(line, page.page_number)
            # Page breaks separate paragraphs
            (current or preamble).lines.append("")

        if current is None:
            return None

        drafts.append(current)
        if preamble.content:
            drafts.insert(0, preamble)

        kept = [d for d in drafts if d.content]
        if len(kept) < len(drafts):
            logger.debug(f"Dropped {len(drafts) - len(kept)} headings without content")
        return kept

    def _paragraph_sections(self, text_pages: List[Page]) -> List[_SectionDraft]:
        """Split heading-less content into up to five paragraph groups"""
        paragraphs = []
        for page in text_pages:
            for paragraph in re.split(r'\n\s*\n', page.text):
                if paragraph.strip():
                    paragraphs.append((paragraph.strip(), page.page_number))

        total = sum(len(text) for text, _ in paragraphs)
        if total <= 50:
            return []

        group_count = min(FALLBACK_GROUPS, len(paragraphs))
        group_size = math.ceil(len(paragraphs) / group_count)

        drafts = []
        for i in range(0, len(paragraphs), group_size):
            group = paragraphs[i:i + group_size]
            draft = _SectionDraft(f"Section {len(drafts) + 1}")
            for text, page_number in group:
                if draft.lines:
                    draft.lines.append("")
                draft.append(text, page_number)
            drafts.append(draft)
        return drafts

    def _visual_sections(self, image_pages: List[Page]) -> List[_SectionDraft]:
        """One section per run of adjacent image-only pages"""
        groups: List[List[Page]] = []
        for page in image_pages:
            if groups and page.page_number == groups[-1][-1].page_number + 1:
                groups[-1].append(page)
            else:
                groups.append([page])

        drafts = []
        for group in groups:
            start, end = group[0].page_number, group[-1].page_number
            page_range = f"Page {start}" if start == end else f"Pages {start}–{end}"
            draft = _SectionDraft(f"Visual Content ({page_range})", image_derived=True)
            for page in group:
                if draft.lines:
                    draft.lines.append("")
                draft.append(page.text, page.page_number)
            draft.bullet_points = [
                p.image_description[:MAX_BULLET_LENGTH] for p in group if p.image_description
            ][:MAX_BULLETS]
            drafts.append(draft)
        return drafts

    def _placeholder_section(self, pages: List[Page]) -> _SectionDraft:
        has_image_pages = any(p.is_image_only for p in pages)
        draft = _SectionDraft("Image Content" if has_image_pages else "Section 1", start_page=1)
        draft.image_derived = has_image_pages
        for page in pages:
            if page.text.strip():
                if draft.lines:
                    draft.lines.append("")
                draft.append(page.text, page.page_number)
        return draft
