from backend.src.services.markdown import extract_plain_text, extract_title


def test_extract_plain_text_strips_markdown_syntax() -> None:
    markdown = (
        "# Title\n\n"
        "Some **bold** and _soft_ text with a [link](http://example.com) and `code`.\n\n"
        "```python\nsecret = 1\n```\n"
        "- first item\n"
        "1. numbered item\n"
        "~~gone~~ ![diagram](img.png)\n"
        "---\n"
    )

    text = extract_plain_text(markdown)

    assert text.startswith("Title")
    assert "bold" in text and "**" not in text
    assert "soft" in text and "_soft_" not in text
    assert "link" in text and "http://example.com" not in text
    assert "secret" not in text and "`" not in text
    assert "first item" in text and "- first" not in text
    assert "numbered item" in text and "1." not in text
    assert "gone" in text and "~~" not in text
    assert "diagram" in text and "img.png" not in text
    assert "---" not in text
    assert "\n\n" not in text


def test_extract_plain_text_removes_front_matter() -> None:
    markdown = "---\ntitle: Hidden\ntags: [alpha]\n---\nBody text"

    assert extract_plain_text(markdown) == "Body text"


def test_extract_plain_text_keeps_malformed_front_matter_as_text() -> None:
    markdown = "---\ntitle: [unclosed\n---\nBody text"

    text = extract_plain_text(markdown)

    assert "unclosed" in text
    assert "Body text" in text


def test_extract_plain_text_handles_empty_input() -> None:
    assert extract_plain_text("") == ""
    assert extract_plain_text(None) == ""


def test_extract_title_prefers_first_heading() -> None:
    assert extract_title("intro line\n## Real Heading\nbody") == "Real Heading"


def test_extract_title_falls_back_to_first_plain_line() -> None:
    assert extract_title("\n\nA **bold** start\nsecond line") == "A bold start"


def test_extract_title_truncates_long_lines() -> None:
    title = extract_title("word " * 50)

    assert len(title) == 100


def test_extract_title_defaults_to_untitled() -> None:
    assert extract_title("") == "Untitled"
    assert extract_title("   \n  ") == "Untitled"
