"""Page content classification from extracted text and image counts"""
from ..models.document import PageClassification

# Text length thresholds (characters of stripped page text)
TEXT_PAGE_MIN_CHARS = 50
IMAGE_ONLY_MAX_CHARS = 20


def classify_page(text: str, image_count: int) -> PageClassification:
    """
    Classify a page from its extracted text and image paint count.

    Rules are applied in order and the first match wins. Pages with 20-50
    characters of text and no images fall through to EMPTY.

    Args:
        text: Raw extracted page text
        image_count: Number of image paint operations on the page

    Returns:
        PageClassification label
    """
    length = len(text.strip())

    if length > TEXT_PAGE_MIN_CHARS and image_count == 0:
        return PageClassification.TEXT
    if length < IMAGE_ONLY_MAX_CHARS and image_count > 0:
        return PageClassification.IMAGE_ONLY
    if length > TEXT_PAGE_MIN_CHARS and image_count > 0:
        return PageClassification.MIXED
    return PageClassification.EMPTY
