"""
Minimal JSON string escaping.

Covers backslash, double quote, newline, carriage return and tab. Anything
else is passed through untouched, so this is best-effort text reconstruction,
not a general JSON string codec.
"""

from typing import Optional

_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}

_UNESCAPES = {
    "\\": "\\",
    '"': '"',
    "n": "\n",
    "r": "\r",
    "t": "\t",
}


def escape(text: Optional[str]) -> str:
    if not text:
        return ""
    return "".join(_ESCAPES.get(ch, ch) for ch in text)


def unescape(text: Optional[str]) -> str:
    # Single left-to-right pass: chained str.replace calls would turn "\\\\n"
    # into a backslash followed by a newline.
    if not text:
        return ""
    out = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == "\\" and i + 1 < len(text) and text[i + 1] in _UNESCAPES:
            out.append(_UNESCAPES[text[i + 1]])
            i += 2
            continue
        out.append(ch)
        i += 1
    return "".join(out)


def find_string_field(text: str, key: str, start: int = 0) -> Optional[str]:
    """
    Scan raw text for the first ``"key":"value"`` at or after ``start`` and
    return the unescaped value, or None.

    Only used when a body could not be decoded as JSON. Nested objects and
    arrays are not understood; the first match wins.
    """
    needle = f'"{escape(key)}":'
    pos = text.find(needle, start)
    while pos != -1:
        i = pos + len(needle)
        while i < len(text) and text[i] in " \t":
            i += 1
        if i < len(text) and text[i] == '"':
            begin = i + 1
            end = begin
            while end < len(text):
                if text[end] == "\\":
                    end += 2
                    continue
                if text[end] == '"':
                    return unescape(text[begin:end])
                end += 1
            return None
        pos = text.find(needle, pos + len(needle))
    return None
