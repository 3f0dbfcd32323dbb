from labsite.core.google_docs_html import (
    BlockList,
    InlineImage,
    SlugRegistry,
    build_sections,
    document_to_sections,
    slugify,
)


def run(text, **style):
    return {"textRun": {"content": text, "textStyle": style}}


def para(*elements, style="NORMAL_TEXT", bullet=None):
    paragraph = {"elements": list(elements), "paragraphStyle": {"namedStyleType": style}}
    if bullet is not None:
        paragraph["bullet"] = {"listId": bullet}
    return {"paragraph": paragraph}


def heading(text, level=1):
    return para(run(text + "\n"), style=f"HEADING_{level}")


def doc(*items):
    return {"body": {"content": list(items)}}


def test_slugify():
    assert slugify("Cell Culture & Imaging!") == "cell-culture-imaging"
    assert slugify("  --Hello--  ") == "hello"
    assert slugify("!!!") == "section"
    assert slugify(None) == "section"


def test_slug_registry_disambiguates_with_counter():
    slugs = SlugRegistry()
    assert [slugs.register("Methods") for _ in range(3)] == ["methods", "methods-2", "methods-3"]
    assert slugs.register("Other") == "other"


def test_heading_opens_section_with_paragraphs():
    sections = document_to_sections(doc(heading("Introduction"), para(run("Hello lab.\n"))))
    assert sections == [
        {"title": "Introduction", "id": "introduction", "blocks": ["<p>Hello lab.</p>"], "subsections": []}
    ]


def test_content_before_first_heading_goes_to_overview():
    sections = document_to_sections(doc(para(run("Welcome\n")), heading("Next")))
    assert [s["title"] for s in sections] == ["Overview", "Next"]
    assert sections[0]["id"] == "overview"
    assert sections[0]["blocks"] == ["<p>Welcome</p>"]


def test_duplicate_titles_get_unique_ids_across_sections_and_subsections():
    sections = document_to_sections(
        doc(
            heading("Methods"),
            heading("Methods", level=3),
            heading("Methods", level=2),
        )
    )
    assert sections[0]["id"] == "methods"
    assert sections[0]["subsections"][0]["id"] == "methods-2"
    assert sections[1]["id"] == "methods-3"


def test_minor_headings_create_subsections():
    sections = document_to_sections(
        doc(
            heading("Genetics"),
            para(run("Intro text\n")),
            heading("Crosses", level=3),
            para(run("Cross text\n")),
            heading("Markers", level=4),
            para(run("Marker text\n")),
        )
    )
    section = sections[0]
    assert section["blocks"] == ["<p>Intro text</p>"]
    assert [(sub["title"], sub["id"]) for sub in section["subsections"]] == [
        ("Crosses", "crosses"),
        ("Markers", "markers"),
    ]
    assert section["subsections"][1]["blocks"] == ["<p>Marker text</p>"]


def test_minor_heading_before_any_section_is_a_paragraph():
    sections = document_to_sections(doc(heading("Loose", level=3)))
    assert sections[0]["title"] == "Overview"
    assert sections[0]["blocks"] == ["<p>Loose</p>"]
    assert sections[0]["subsections"] == []


def test_heading_title_collapses_whitespace_and_defaults():
    sections = document_to_sections(
        doc(
            para(run("  Cell "), run(" Biology\n"), style="HEADING_1"),
            para(run("\n"), style="HEADING_2"),
            para(run("\n"), style="HEADING_3"),
        )
    )
    assert sections[0]["title"] == "Cell Biology"
    assert sections[1]["title"] == "Untitled section"
    assert sections[1]["id"] == "untitled-section"
    assert sections[1]["subsections"][0]["title"] == "Subsection"
    assert sections[1]["subsections"][0]["id"] == "subsection"


def test_consecutive_bullets_share_one_list():
    sections = document_to_sections(
        doc(
            heading("Lists"),
            para(run("One\n"), bullet="a"),
            para(run("Two\n"), bullet="a"),
            para(run("Three\n"), bullet="b"),
            para(run("After\n")),
        )
    )
    assert sections[0]["blocks"] == [
        "<ul><li>One</li><li>Two</li></ul>",
        "<ul><li>Three</li></ul>",
        "<p>After</p>",
    ]


def test_pending_list_is_flushed_before_heading_and_at_end():
    sections = document_to_sections(
        doc(
            heading("A"),
            para(run("item\n"), bullet="x"),
            heading("B", level=3),
            para(run("last\n"), bullet="y"),
        )
    )
    assert sections[0]["blocks"] == ["<ul><li>item</li></ul>"]
    assert sections[0]["subsections"][0]["blocks"] == ["<ul><li>last</li></ul>"]


def test_empty_paragraphs_and_whitespace_runs_add_nothing():
    sections = document_to_sections(
        doc(
            heading("A"),
            para(run("\n")),
            para(run("Hello", bold=True), run(" "), run("world\n")),
        )
    )
    assert sections[0]["blocks"] == ["<p><strong>Hello</strong>world</p>"]


def test_text_is_escaped():
    sections = document_to_sections(doc(para(run("5 < 6 & \"quotes\"\n"))))
    assert sections[0]["blocks"] == ["<p>5 &lt; 6 &amp; &quot;quotes&quot;</p>"]


def test_inline_images_substituted_or_omitted():
    images = {"kix.1": InlineImage(data_url="data:image/png;base64,AAAA", alt='Gel "lane"')}
    content = doc(
        heading("Figures"),
        para({"inlineObjectElement": {"inlineObjectId": "kix.1"}}, run(" caption\n")),
        para({"inlineObjectElement": {"inlineObjectId": "kix.missing"}}),
    )
    sections = document_to_sections(content, images)
    assert sections[0]["blocks"] == [
        '<p><img src="data:image/png;base64,AAAA" alt="Gel &quot;lane&quot;" class="inline-image"> caption</p>'
    ]


def test_missing_body_and_ignorable_items():
    assert document_to_sections({}) == []
    assert build_sections(None) == []
    assert document_to_sections(doc(None, {"sectionBreak": {}}, {"table": {}})) == []


def test_malformed_runs_do_not_abort_the_document():
    images = {"img1": InlineImage("data:image/png;base64,AA", "Gel")}
    sections = document_to_sections(
        doc(
            para({"textRun": {"content": 12}}),
            para({"textRun": {"content": ["a", "b"]}}, run("kept")),
            para({"inlineObjectElement": {"inlineObjectId": ["img1"]}}),
            para(run("link", link={"url": 42})),
            {"paragraph": {"elements": [run("Heading")], "paragraphStyle": {"namedStyleType": ["HEADING_1"]}}},
            para(run("Valid paragraph")),
        ),
        images,
    )
    assert sections == [{
        "title": "Overview",
        "id": "overview",
        "blocks": ["<p>kept</p>", "<p>link</p>", "<p>Heading</p>", "<p>Valid paragraph</p>"],
        "subsections": [],
    }]


def test_heading_with_malformed_run_keeps_string_text():
    sections = document_to_sections(doc(para({"textRun": {"content": 7}}, run("Methods\n"), style="HEADING_1")))
    assert [(s["title"], s["id"]) for s in sections] == [("Methods", "methods")]


def test_block_list_ignores_empty_paragraph_and_keeps_empty_list_items():
    blocks = BlockList()
    blocks.append_paragraph("")
    blocks.append_list_item("l1", "")
    blocks.append_list_item("l1", "b")
    blocks.flush()
    blocks.flush()
    assert blocks.blocks == ["<ul><li></li><li>b</li></ul>"]
