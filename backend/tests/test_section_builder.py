from intelliread.models.document import Page, PageClassification
from intelliread.services.section_builder import (
    SectionBuilder,
    extract_bullet_points,
    is_heading,
)


def text_page(number, text):
    return Page(page_number=number, text=text, classification=PageClassification.TEXT)


def image_page(number, description):
    return Page(
        page_number=number,
        text=f"[Image Content - Page {number}]\n{description}",
        image_count=1,
        classification=PageClassification.IMAGE_ONLY,
        image_description=description,
    )


def test_heading_detection():
    assert is_heading("Chapter 3: Methods")
    assert is_heading("section 2. Scope")
    assert is_heading("2.1 Background")
    assert is_heading("EXECUTIVE SUMMARY")
    assert is_heading("Conclusion")
    assert not is_heading("This is an ordinary sentence.")
    assert not is_heading("PDF")
    assert not is_heading("CHAPTER " + "X" * 100)
    assert not is_heading("")


def test_heading_sections_with_preamble():
    pages = [
        text_page(1, "Quarterly update prepared for the board.\n1. Overview\nRevenue grew strongly this quarter."),
        text_page(2, "More overview detail carried onto the next page.\n2. Risks\nCurrency exposure remains high."),
    ]

    sections = SectionBuilder().build(pages, "doc")

    assert [s.title for s in sections] == ["Introduction", "1. Overview", "2. Risks"]
    overview = sections[1]
    assert (overview.start_page, overview.end_page) == (1, 2)
    assert "More overview detail" in overview.content
    assert [s.order for s in sections] == [0, 1, 2]
    assert [s.id for s in sections] == ["doc_s0", "doc_s1", "doc_s2"]


def test_headings_without_content_are_dropped():
    pages = [text_page(1, "INTRODUCTION\nABSTRACT\nThe study measures reading speed across groups.")]

    sections = SectionBuilder().build(pages)

    assert [s.title for s in sections] == ["ABSTRACT"]


def test_paragraph_fallback_without_headings():
    paragraphs = [f"Paragraph {i} discusses a separate topic in some detail." for i in range(7)]
    pages = [text_page(1, "\n\n".join(paragraphs[:4])), text_page(2, "\n\n".join(paragraphs[4:]))]

    sections = SectionBuilder().build(pages)

    assert [s.title for s in sections] == ["Section 1", "Section 2", "Section 3", "Section 4"]
    assert sections[0].content.startswith("Paragraph 0")
    assert sections[-1].end_page == 2
    assert all(p in " ".join(s.content for s in sections) for p in paragraphs)


def test_image_only_runs_become_visual_sections():
    pages = [
        text_page(1, "1. Introduction to the product line\nThe catalogue lists every model we sell."),
        image_page(2, "Photo of the flagship model."),
        image_page(3, "Exploded view of the chassis."),
        text_page(4, "2. Pricing\nPrices are listed per unit and exclude taxes."),
        image_page(6, "Map of store locations."),
    ]

    sections = SectionBuilder().build(pages, "doc")

    titles = [s.title for s in sections]
    assert titles == [
        "1. Introduction to the product line",
        "Visual Content (Pages 2–3)",
        "2. Pricing",
        "Visual Content (Page 6)",
    ]
    visual = sections[1]
    assert visual.is_image_derived
    assert visual.bullet_points == ["Photo of the flagship model.", "Exploded view of the chassis."]
    assert "[Image Content - Page 3]" in visual.content
    assert [s.start_page for s in sections] == sorted(s.start_page for s in sections)


def test_empty_document_gets_placeholder_section():
    sections = SectionBuilder().build([
        Page(page_number=1, text="", classification=PageClassification.EMPTY)
    ])

    assert len(sections) == 1
    assert sections[0].title == "Section 1"
    assert sections[0].content == "No content extracted from this document."


def test_bullet_points():
    text = (
        "The first sentence is long enough to count. The second sentence is also long enough. "
        "The third sentence keeps going for a while. A filler sentence without any marker. "
        "The key finding is that costs fell sharply. Tiny one."
    )

    bullets = extract_bullet_points(text)

    assert bullets == [
        "The first sentence is long enough to count",
        "The second sentence is also long enough",
        "The third sentence keeps going for a while",
        "The key finding is that costs fell sharply",
    ]
    assert extract_bullet_points("") == ["No text content available"]
    assert extract_bullet_points("Short.") == ["Short."]
