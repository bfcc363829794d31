import pytest

from intelliread.models.document import PageClassification
from intelliread.services.page_classifier import classify_page


@pytest.mark.parametrize(
    "text, image_count, expected",
    [
        ("x" * 51, 0, PageClassification.TEXT),
        ("x" * 10, 2, PageClassification.IMAGE_ONLY),
        ("", 1, PageClassification.IMAGE_ONLY),
        ("x" * 80, 3, PageClassification.MIXED),
        ("x" * 30, 0, PageClassification.EMPTY),
        ("", 0, PageClassification.EMPTY),
        ("x" * 35, 1, PageClassification.EMPTY),
        ("x" * 50, 0, PageClassification.EMPTY),
    ],
)
def test_classification_rules(text, image_count, expected):
    assert classify_page(text, image_count) == expected


def test_surrounding_whitespace_is_ignored():
    assert classify_page("   " + "x" * 10 + "\n\n   " * 20, 1) == PageClassification.IMAGE_ONLY
