from __future__ import annotations

import httpx
import pytest

from app.crawlers.readme import ReadmeCrawler, ReadmeNotFoundError, readme_to_text

README = """# Rocket

A **fast** `tool` for [launching](https://example.com) things.
![logo](docs/logo.png)

```bash
rm -rf /
```

<p align="center">Made with snake_case love</p>
"""


def _crawler(files: dict[str, str], requested: list[str]) -> ReadmeCrawler:
    def handler(request: httpx.Request) -> httpx.Response:
        requested.append(request.url.path)
        body = files.get(request.url.path)
        if body is None:
            return httpx.Response(404, text="404: Not Found")
        return httpx.Response(200, text=body)

    return ReadmeCrawler(client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))


def test_readme_to_text_strips_markdown_and_html() -> None:
    text = readme_to_text(README)

    assert text == "Rocket A fast tool for launching things. Made with snake_case love"
    assert "rm -rf" not in text


def test_readme_to_text_keeps_code_spans_and_drops_block_markup() -> None:
    markdown = (
        "# Tool\n\n"
        "- fast\n"
        "- small\n\n"
        "> note\n\n"
        "| a | b |\n"
        "|---|---|\n"
        "| 1 | 2 |\n\n"
        "Use `Vec<T>` and `Option<String>` types."
    )

    text = readme_to_text(markdown)

    assert text == "Tool fast small note a b 1 2 Use Vec<T> and Option<String> types."


@pytest.mark.asyncio
async def test_fetch_repository_readme_tries_locations_in_order() -> None:
    requested: list[str] = []
    crawler = _crawler({"/acme/rocket/main/README.md": README}, requested)

    text = await crawler.fetch_repository_readme("acme", "rocket")

    assert text.startswith("Rocket A fast tool")
    assert requested == [
        "/acme/rocket/release/readme.md",
        "/acme/rocket/dev/README.rst",
        "/acme/rocket/main/README.md",
    ]


@pytest.mark.asyncio
async def test_fetch_repository_readme_raises_when_missing() -> None:
    requested: list[str] = []
    crawler = _crawler({}, requested)

    with pytest.raises(ReadmeNotFoundError):
        await crawler.fetch_repository_readme("acme", "rocket")

    assert len(requested) == 4
