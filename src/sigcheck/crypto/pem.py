"""PEM layout normalization for public keys carried in HTTP headers.

Header transport routinely flattens PEM to a single line (folding, URL
encoding, JSON escaping). Key loaders want the RFC 7468 layout:

    -----BEGIN PUBLIC KEY-----
    <base64, 64 chars per line>
    -----END PUBLIC KEY-----

normalize_pem() is total: it never raises and never validates. Garbage in
gives garbage out, and the key parser reports it.
"""
from __future__ import annotations

import re
from typing import List

PEM_BEGIN = "-----BEGIN PUBLIC KEY-----"
PEM_END = "-----END PUBLIC KEY-----"
PEM_LINE_WIDTH = 64

_BEGIN_RE = re.compile(re.escape(PEM_BEGIN) + r"\s*")
_END_RE = re.compile(r"\s*" + re.escape(PEM_END))
# Escaped line breaks as they show up in headers: "\n" typed literally or URL-encoded.
_ESCAPED_BREAK_RE = re.compile(r"\\r\\n|\\n|%0D%0A|%0A", re.IGNORECASE)


def _wrap(body: str) -> List[str]:
    return [body[i:i + PEM_LINE_WIDTH] for i in range(0, len(body), PEM_LINE_WIDTH)]


def normalize_pem(raw_text: str) -> str:
    if "\n" in raw_text:
        return raw_text
    text = _ESCAPED_BREAK_RE.sub("\n", raw_text)
    if "\n" in text:
        return text
    text = _BEGIN_RE.sub(PEM_BEGIN + "\n", text, count=1)
    text = _END_RE.sub("\n" + PEM_END, text, count=1)
    lines: List[str] = []
    for line in text.split("\n"):
        if "-----" in line:
            lines.append(line)
            continue
        # A body of exactly 64*k chars gives k full lines; no blank line before END.
        lines.extend(_wrap("".join(line.split())))
    return "\n".join(lines)


def single_line(pem_text: str) -> str:
    """Flatten PEM text to one line the way HTTP clients typically send it."""
    return " ".join(part.strip() for part in pem_text.splitlines() if part.strip())


__all__ = ["normalize_pem", "single_line", "PEM_BEGIN", "PEM_END", "PEM_LINE_WIDTH"]
