"""Fallback parsers for articles stored as legacy markdown, plus export."""

from __future__ import annotations

import re

from reviewdesk_store.models import Block, Section

WORD_ESTIMATES = {"H1": 200, "H2": 150, "H3": 100}

_HEADING_PREFIXES = (("### ", "H3"), ("## ", "H2"), ("# ", "H1"))
_LEADING_HASHES = re.compile(r"^#+\s*")


def parse_outline(markdown: str) -> list[Section]:
    """Turn `#`/`##`/`###` headings into outline sections; everything else is ignored."""
    sections: list[Section] = []
    for line in (markdown or "").splitlines():
        stripped = line.strip()
        for prefix, level in _HEADING_PREFIXES:
            if stripped.startswith(prefix):
                title = stripped[len(prefix) :].strip()
                if title:
                    sections.append(
                        Section(
                            id=f"section-{len(sections) + 1}",
                            level=level,
                            title=title,
                            word_count_estimate=WORD_ESTIMATES[level],
                        )
                    )
                break
    return sections


def parse_content(markdown: str) -> list[Block]:
    """Split markdown into header, quote and paragraph blocks.

    Consecutive text lines join into one paragraph until a blank line,
    heading or quote ends it.
    """
    blocks: list[Block] = []
    paragraph: list[str] = []

    def add(kind: str, content: str) -> None:
        blocks.append(Block(id=f"block-{len(blocks) + 1}", type=kind, content=content))

    def flush() -> None:
        if paragraph:
            add("paragraph", "\n".join(paragraph).strip())
            paragraph.clear()

    for line in (markdown or "").splitlines():
        stripped = line.strip()
        if stripped.startswith("#"):
            flush()
            add("header", _LEADING_HASHES.sub("", stripped))
        elif stripped.startswith(">"):
            flush()
            add("quote", stripped[1:].strip())
        elif not stripped:
            flush()
        else:
            paragraph.append(stripped)
    flush()
    return blocks


def blocks_to_markdown(blocks: list[Block]) -> str:
    """Render content blocks back to markdown for export."""
    parts = []
    for block in blocks:
        if block.type == "header":
            parts.append(f"# {block.content}")
        elif block.type == "quote":
            parts.append(f"> {block.content}")
        elif block.type == "image":
            parts.append(f"![{block.content}]({block.content})")
        else:
            parts.append(block.content)
    return "".join(f"{p}\n\n" for p in parts)


def export_filename(name: str) -> str:
    return re.sub(r"\s+", "_", name.strip()) + "_approved.md"
