"""
Helpers that derive page metadata from a feed's Markdown body:
the first image (used as list thumbnail / og:image), a plain description
and the heading outline for the table of contents.
"""
import re
from typing import Optional

IMAGE_RE = re.compile(r"!\[.*?\]\((.*?)\)")
HEADING_RE = re.compile(r"^(#{1,6})\s+(.+?)\s*#*\s*$")
FENCE_RE = re.compile(r"^\s*(```|~~~)")

SUMMARY_LENGTH = 100
DESCRIPTION_LENGTH = 200


def first_image(content: str) -> Optional[str]:
    match = IMAGE_RE.search(content)
    return match.group(1) if match else None


def summarize(content: str, length: int = SUMMARY_LENGTH) -> str:
    return content if len(content) <= length else content[:length]


def slugify(text: str) -> str:
    """GitHub-style heading anchor: lowercase, punctuation dropped, spaces to hyphens."""
    slug = re.sub(r"[^\w\- ]", "", text.strip().lower())
    return slug.replace(" ", "-")


def extract_toc(content: str) -> list[dict]:
    """
    Return [{level, text, anchor}] for every ATX heading outside fenced code.
    Repeated anchors get -1, -2, ... suffixes so each one is unique.
    """
    toc: list[dict] = []
    seen: dict[str, int] = {}
    in_fence = False
    for line in content.splitlines():
        if FENCE_RE.match(line):
            in_fence = not in_fence
            continue
        if in_fence:
            continue
        match = HEADING_RE.match(line)
        if not match:
            continue
        text = match.group(2)
        anchor = slugify(text)
        if anchor in seen:
            seen[anchor] += 1
            anchor = f"{anchor}-{seen[anchor]}"
        else:
            seen[anchor] = 0
        toc.append({"level": len(match.group(1)), "text": text, "anchor": anchor})
    return toc
