from categories.sections import Section, sections_to_items, split_sections


def test_markdown_headings():
    text = "# Overview\nMarkets rose.\n\n**Risks**\nRates may climb.\n"
    assert split_sections(text) == [
        Section("Overview", "Markets rose."),
        Section("Risks", "Rates may climb."),
    ]


def test_paragraph_titles():
    text = "Funding climate\n\nVC funding rebounded.\n\nOutlook\n\nMore deals are expected."
    sections = split_sections(text)
    assert [s.title for s in sections] == ["Funding climate", "Outlook"]


def test_chunks_for_plain_prose():
    sentence = "Investment activity remained strong across the sector this quarter. "
    sections = split_sections(sentence * 20)
    assert len(sections) >= 2
    assert all(len(s.body) <= 500 for s in sections)
    assert sections[0].title == "Investment activity remained strong across the sector this quarter."


def test_max_sections_and_blank_text():
    text = "\n".join(f"## Part {i}\nbody {i}" for i in range(10))
    assert len(split_sections(text, max_sections=3)) == 3
    assert split_sections("   ") == []


def test_sections_become_attributed_items():
    sections = [Section("One", "first body"), Section("Two", "second body")]
    sources = [{"url": "https://example.com/src", "title": "Source"}, "ignored"]
    items = sections_to_items(sections, sources)
    assert [i.url for i in items] == [
        "https://example.com/src#section-1",
        "https://example.com/src#section-2",
    ]
    assert items[0].references[0].title == "Source"
    assert items[0].identity != items[1].identity


def test_sections_without_sources_use_ids():
    items = sections_to_items([Section("One", "a"), Section("Two", "a")])
    assert [i.id for i in items] == ["section-1", "section-2"]
    assert items[0].identity != items[1].identity
