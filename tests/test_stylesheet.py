"""Tests for provider stylesheet URL building and parsing."""

from thumbnail_service.services.stylesheet import (
    build_stylesheet_url,
    parse_font_faces,
    parse_font_urls,
    select_font_url,
)

GOOGLE_CSS = """
/* cyrillic */
@font-face {
  font-family: 'Inter';
  font-style: normal;
  font-weight: 700;
  font-display: swap;
  src: url(https://fonts.gstatic.com/s/inter/cyrillic-700.woff2) format('woff2');
}
/* latin-ext */
@font-face {
  font-family: 'Inter';
  font-style: normal;
  font-weight: 700;
  font-display: swap;
  src: url(https://fonts.gstatic.com/s/inter/latin-ext-700.woff2) format('woff2');
}
/* latin */
@font-face {
  font-family: 'Inter';
  font-style: italic;
  font-weight: 500;
  font-display: swap;
  src: url(https://fonts.gstatic.com/s/inter/latin-500-italic.woff2) format('woff2');
}
/* latin */
@font-face {
  font-family: 'Inter';
  font-style: normal;
  font-weight: 500;
  font-display: swap;
  src: url(https://fonts.gstatic.com/s/inter/latin-500.woff2) format('woff2');
}
/* latin */
@font-face {
  font-family: 'Inter';
  font-style: normal;
  font-weight: 700;
  font-display: swap;
  src: url(https://fonts.gstatic.com/s/inter/latin-700.woff2) format('woff2');
}
"""


def test_build_stylesheet_url():
    url = build_stylesheet_url("https://fonts.googleapis.com/css2", "Inter", {700, 500})
    assert url == "https://fonts.googleapis.com/css2?family=Inter:wght@500;700&display=swap"


def test_build_stylesheet_url_encodes_family():
    url = build_stylesheet_url("https://fonts.googleapis.com/css2", "Open Sans", [400])
    assert "family=Open+Sans:wght@400" in url


def test_parse_font_faces_reads_every_block():
    blocks = parse_font_faces(GOOGLE_CSS)

    assert len(blocks) == 5
    assert blocks[0].subset == "cyrillic"
    assert blocks[0].weight == 700
    assert blocks[2].is_italic


def test_preferred_subset_wins_over_document_order():
    urls = parse_font_urls(GOOGLE_CSS, [500, 700], preferred_subset="latin")

    assert urls == {
        500: "https://fonts.gstatic.com/s/inter/latin-500.woff2",
        700: "https://fonts.gstatic.com/s/inter/latin-700.woff2",
    }


def test_first_block_used_without_preferred_subset():
    urls = parse_font_urls(GOOGLE_CSS, [700], preferred_subset=None)
    assert urls[700] == "https://fonts.gstatic.com/s/inter/cyrillic-700.woff2"


def test_italic_blocks_are_ignored():
    css = """
    @font-face {
      font-style: italic;
      font-weight: 400;
      src: url(https://example.test/italic.woff2);
    }
    """
    assert parse_font_urls(css, [400]) == {}


def test_no_nearest_weight_substitution():
    assert select_font_url(parse_font_faces(GOOGLE_CSS), 600) is None


def test_weight_ranges_never_match():
    css = """
    /* latin */
    @font-face {
      font-style: normal;
      font-weight: 100 900;
      src: url(https://example.test/variable.woff2) format('woff2');
    }
    """
    assert parse_font_urls(css, [500]) == {}


def test_quoted_urls_and_keywords():
    css = """
    @font-face {
      font-weight: bold;
      src: url('https://example.test/bold.ttf') format('truetype');
    }
    @font-face {
      src: url("https://example.test/regular.ttf");
    }
    """
    urls = parse_font_urls(css, [400, 700])

    assert urls == {
        400: "https://example.test/regular.ttf",
        700: "https://example.test/bold.ttf",
    }


def test_blocks_without_src_are_skipped():
    css = "@font-face { font-weight: 400; font-style: normal; }"
    assert parse_font_faces(css) == []
