"""Markdown to Telegram-safe HTML conversion and message chunking."""

from __future__ import annotations

import re

from .constants import ALLOWED_TAGS, SPLIT_DELIMITERS, SPLIT_MIN_RATIO, TELEGRAM_MAX_LENGTH

# Placeholder tokens look like "\x00<index>\x00". Raw "\x00" in the input is
# itself shielded first, so a token can only ever come from _Placeholders.
_SENTINEL = "\x00"
_TOKEN_RE = re.compile(r"\x00(\d+)\x00")

_ALLOWED_TAG_RE = re.compile(r"</?(?:%s)\b[^>]*>" % "|".join(ALLOWED_TAGS))
# A language tag only counts when a newline follows it; "```ls -la```" keeps "ls".
_FENCED_CODE_RE = re.compile(r"```(?:\w*\n)?([\s\S]*?)```")
_INLINE_CODE_RE = re.compile(r"`([^`\n]+)`")
_LINK_RE = re.compile(r"\[([^\]]+)\]\(([^)]+)\)")
_BOLD_STAR_RE = re.compile(r"\*\*(.+?)\*\*")
_BOLD_UNDERSCORE_RE = re.compile(r"__(.+?)__")
_ITALIC_STAR_RE = re.compile(r"(?<!\w)\*([^*\n<]+)\*(?!\w)")
_ITALIC_UNDERSCORE_RE = re.compile(r"(?<!\w)_([^_\n<]+)_(?!\w)")
_STRIKE_RE = re.compile(r"~~(.+?)~~")
_HEADING_RE = re.compile(r"^#{1,6}[ \t]+(.+)$", re.MULTILINE)
_BULLET_RE = re.compile(r"^[ \t]*[-*][ \t]+", re.MULTILINE)

_HTML_COMMENT_RE = re.compile(r"<!--[\s\S]*?-->|&lt;!--[\s\S]*?--&gt;")
_CODE_REGION_RE = re.compile(r"(<pre>[\s\S]*?</pre>|<code>[\s\S]*?</code>)")


def escape_html(text: str | None) -> str:
    """Escape HTML special characters (& first, so entities aren't doubled)."""
    if not text:
        return ""
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


class _Placeholders:
    """Side table of protected fragments, addressed by insertion order."""

    def __init__(self):
        self._items: list[str] = []

    def add(self, content: str) -> str:
        self._items.append(content)
        return f"{_SENTINEL}{len(self._items) - 1}{_SENTINEL}"

    def restore(self, text: str) -> str:
        """Swap every token back in a single sweep.

        Stored fragments may themselves hold older tokens (e.g. an allowed
        tag inside a fenced block), so each fragment is restored recursively.
        Indices only point backwards, which bounds the recursion.
        """

        def _sub(m: re.Match) -> str:
            index = int(m.group(1))
            if index >= len(self._items):
                return m.group(0)
            return self.restore(self._items[index])

        return _TOKEN_RE.sub(_sub, text)

    def __len__(self) -> int:
        return len(self._items)


# ── Protection passes (must run before escaping) ─────────────


def shield_sentinels(text: str, table: _Placeholders) -> str:
    return text.replace(_SENTINEL, table.add(_SENTINEL)) if _SENTINEL in text else text


def protect_allowed_tags(text: str, table: _Placeholders) -> str:
    """Keep already-valid Telegram tags verbatim."""
    return _ALLOWED_TAG_RE.sub(lambda m: table.add(m.group(0)), text)


def extract_fenced_code(text: str, table: _Placeholders) -> str:
    def _extract(m: re.Match) -> str:
        code = m.group(1)
        if code.endswith("\n"):
            code = code[:-1]
        return table.add(f"<pre>{escape_html(code)}</pre>")

    return _FENCED_CODE_RE.sub(_extract, text)


def extract_inline_code(text: str, table: _Placeholders) -> str:
    return _INLINE_CODE_RE.sub(lambda m: table.add(f"<code>{escape_html(m.group(1))}</code>"), text)


# ── Markdown passes (run on escaped text) ────────────────────


def convert_links(text: str) -> str:
    return _LINK_RE.sub(r'<a href="\2">\1</a>', text)


def convert_bold(text: str) -> str:
    text = _BOLD_STAR_RE.sub(r"<b>\1</b>", text)
    return _BOLD_UNDERSCORE_RE.sub(r"<b>\1</b>", text)


def convert_italic(text: str) -> str:
    # Lookarounds keep snake_case identifiers and leftover bold markers intact.
    text = _ITALIC_STAR_RE.sub(r"<i>\1</i>", text)
    return _ITALIC_UNDERSCORE_RE.sub(r"<i>\1</i>", text)


def convert_strikethrough(text: str) -> str:
    return _STRIKE_RE.sub(r"<s>\1</s>", text)


def convert_headings(text: str) -> str:
    """Telegram has no headings, so every level becomes bold."""
    return _HEADING_RE.sub(r"<b>\1</b>", text)


def convert_bullets(text: str) -> str:
    # Numbered lists already read fine as plain text.
    return _BULLET_RE.sub("• ", text)


def markdown_to_telegram_html(text: str | None) -> str:
    """Convert LLM markdown to Telegram-safe HTML.

    Handles existing Telegram tags, code blocks, inline code, links, bold,
    italic, strikethrough, headings and list markers. All other text is
    HTML-escaped exactly once.
    """
    if not text:
        return ""

    table = _Placeholders()

    # 1. Shield content that later passes must never touch
    text = shield_sentinels(text, table)
    text = protect_allowed_tags(text, table)
    text = extract_fenced_code(text, table)
    text = extract_inline_code(text, table)

    # 2. Escape whatever is left outside the placeholders
    text = escape_html(text)

    # 3. Markdown formatting (order matters)
    text = convert_links(text)
    text = convert_bold(text)
    text = convert_italic(text)
    text = convert_strikethrough(text)
    text = convert_headings(text)
    text = convert_bullets(text)

    # 4. Put protected fragments back
    return table.restore(text)


def strip_html_comments(text: str) -> str:
    """Drop HTML comments, which Telegram's HTML parser rejects.

    Comments that were escaped by the transcoder are dropped too, except
    inside <pre>/<code> where they are part of the code being shown.
    """
    if not text:
        return ""
    parts = _CODE_REGION_RE.split(text)
    # split() with one capture group puts code regions at odd indices.
    for i in range(0, len(parts), 2):
        parts[i] = _HTML_COMMENT_RE.sub("", parts[i])
    return "".join(parts)


def smart_split(text: str, max_length: int = TELEGRAM_MAX_LENGTH) -> list[str]:
    """Split text into chunks that fit Telegram's limit.

    Prefers paragraph > newline > sentence > space boundaries, falling back
    to a hard cut at max_length. Whitespace is trimmed only at cut points.
    """
    if isinstance(max_length, bool) or not isinstance(max_length, int) or max_length <= 0:
        raise ValueError(f"max_length must be a positive integer, got {max_length!r}")
    if not text:
        return []
    if len(text) <= max_length:
        return [text]

    chunks: list[str] = []
    remaining = text
    min_index = max_length * SPLIT_MIN_RATIO

    while remaining:
        if len(remaining) <= max_length:
            chunks.append(remaining)
            break

        window = remaining[:max_length]
        split_at = max_length
        for delim in SPLIT_DELIMITERS:
            idx = window.rfind(delim)
            if idx > min_index:
                split_at = idx + len(delim)
                break

        chunks.append(remaining[:split_at].rstrip())
        remaining = remaining[split_at:].lstrip()

    return chunks


def format_for_telegram(text: str | None, max_length: int = TELEGRAM_MAX_LENGTH) -> list[str]:
    """Full outbound pipeline: transcode, strip comments, split."""
    html = strip_html_comments(markdown_to_telegram_html(text))
    if not html.strip():
        return []
    return smart_split(html, max_length)
