"""Script classification: bucket characters by the font that should draw them."""

from __future__ import annotations

import bisect

from svg_laser_text.models import ScriptTag

DEFAULT_SCRIPT: ScriptTag = "default"

# (first, last, tag) sorted by first codepoint, non-overlapping.
_SCRIPT_RANGES: list[tuple[int, int, ScriptTag]] = [
    (0x0041, 0x005A, "latin"),
    (0x0061, 0x007A, "latin"),
    (0x00AA, 0x00AA, "latin"),
    (0x00BA, 0x00BA, "latin"),
    (0x00C0, 0x00D6, "latin"),
    (0x00D8, 0x00F6, "latin"),
    (0x00F8, 0x024F, "latin"),
    (0x0250, 0x02AF, "latin"),
    (0x0370, 0x03FF, "greek"),
    (0x0400, 0x052F, "cyrillic"),
    (0x0591, 0x05F4, "hebrew"),
    (0x0600, 0x06FF, "arabic"),
    (0x0750, 0x077F, "arabic"),
    (0x08A0, 0x08FF, "arabic"),
    (0x0900, 0x097F, "devanagari"),
    (0x0E00, 0x0E7F, "thai"),
    (0x1E00, 0x1EFF, "latin"),
    (0x1F00, 0x1FFF, "greek"),
    (0x3040, 0x30FF, "kana"),
    (0x3400, 0x4DBF, "han"),
    (0x4E00, 0x9FFF, "han"),
    (0xA8E0, 0xA8FF, "devanagari"),
    (0xAC00, 0xD7AF, "hangul"),
    (0xF900, 0xFAFF, "han"),
    (0xFB00, 0xFB06, "latin"),
    (0xFB1D, 0xFB4F, "hebrew"),
    (0xFB50, 0xFDFF, "arabic"),
    (0xFE70, 0xFEFF, "arabic"),
    (0xFF21, 0xFF3A, "latin"),
    (0xFF41, 0xFF5A, "latin"),
]
_RANGE_STARTS = [start for start, _end, _tag in _SCRIPT_RANGES]

# ISO 15924 script and BCP 47 language hints handed to the shaper.
_HB_SCRIPTS: dict[ScriptTag, tuple[str, str]] = {
    "latin": ("Latn", "en"),
    "greek": ("Grek", "el"),
    "cyrillic": ("Cyrl", "ru"),
    "hebrew": ("Hebr", "he"),
    "arabic": ("Arab", "ar"),
    "devanagari": ("Deva", "hi"),
    "thai": ("Thai", "th"),
    "kana": ("Kana", "ja"),
    "han": ("Hani", "zh"),
    "hangul": ("Hang", "ko"),
}

_RTL_SCRIPTS = frozenset({"hebrew", "arabic"})


def classify(char: str) -> ScriptTag:
    """Return the script tag for a single character.

    Total over all codepoints: anything outside the known ranges, including
    digits, punctuation and whitespace, is ``"default"``.
    """
    if not char:
        return DEFAULT_SCRIPT
    cp = ord(char[0])
    idx = bisect.bisect_right(_RANGE_STARTS, cp) - 1
    if idx >= 0:
        start, end, tag = _SCRIPT_RANGES[idx]
        if start <= cp <= end:
            return tag
    return DEFAULT_SCRIPT


def classify_text(text: str) -> list[ScriptTag]:
    return [classify(ch) for ch in text]


def resolve_neutrals(tags: list[ScriptTag]) -> list[ScriptTag]:
    """Give ``default`` characters the script of their preceding run.

    Leading neutrals take the first real script that follows them. A line
    made only of neutrals stays ``default``.
    """
    resolved = list(tags)
    current = next((t for t in tags if t != DEFAULT_SCRIPT), DEFAULT_SCRIPT)
    for i, tag in enumerate(tags):
        if tag == DEFAULT_SCRIPT:
            resolved[i] = current
        else:
            current = tag
    return resolved


def script_runs(text: str) -> list[tuple[int, int, ScriptTag]]:
    """Split ``text`` into maximal ``(start, end, tag)`` runs, end exclusive."""
    if not text:
        return []
    tags = resolve_neutrals(classify_text(text))
    runs = []
    run_start = 0
    for i in range(1, len(tags)):
        if tags[i] != tags[run_start]:
            runs.append((run_start, i, tags[run_start]))
            run_start = i
    runs.append((run_start, len(tags), tags[run_start]))
    return runs


def hb_script(tag: ScriptTag) -> str | None:
    entry = _HB_SCRIPTS.get(tag)
    return entry[0] if entry else None


def hb_language(tag: ScriptTag) -> str | None:
    entry = _HB_SCRIPTS.get(tag)
    return entry[1] if entry else None


def is_rtl_script(tag: ScriptTag) -> bool:
    return tag in _RTL_SCRIPTS


class ScriptClassifier:
    """Callable wrapper so the classifier can be injected and swapped in tests."""

    def classify(self, char: str) -> ScriptTag:
        return classify(char)

    def __call__(self, char: str) -> ScriptTag:
        return classify(char)

    def classify_text(self, text: str) -> list[ScriptTag]:
        return classify_text(text)
