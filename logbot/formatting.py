"""Convert IRC inline formatting codes into HTML.

Messages are stored as HTML so that colours and emphasis survive. Reverse
video has no sensible HTML equivalent and is rendered as italic.
"""

import html
import re

BOLD = "\x02"
COLOUR = "\x03"
HEX_COLOUR = "\x04"
RESET = "\x0f"
MONOSPACE = "\x11"
REVERSE = "\x16"
ITALIC = "\x1d"
STRIKE = "\x1e"
UNDERLINE = "\x1f"

# mIRC's 16 standard colours. 99 means "default" and maps to no colour.
PALETTE = (
    "#ffffff", "#000000", "#00007f", "#009300",
    "#ff0000", "#7f0000", "#9c009c", "#fc7f00",
    "#ffff00", "#00fc00", "#009393", "#00ffff",
    "#0000fc", "#ff00ff", "#7f7f7f", "#d2d2d2",
)

TOGGLES = {
    BOLD: "bold",
    ITALIC: "italic",
    UNDERLINE: "underline",
    STRIKE: "strike",
    MONOSPACE: "monospace",
    REVERSE: "reverse",
}

# (state flag, tag), outermost first after the colour span.
TAGS = (
    ("bold", "b"),
    ("italic", "i"),
    ("underline", "u"),
    ("strike", "s"),
    ("monospace", "code"),
)

CONTROL_RE = re.compile(
    r"\x03(?:(\d{1,2})(?:,(\d{1,2}))?)?"
    r"|\x04(?:[0-9a-fA-F]{6}(?:,[0-9a-fA-F]{6})?)?"
    r"|[\x02\x0f\x11\x16\x1d\x1e\x1f]"
)


def _colour(code: str | None) -> str | None:
    if code is None:
        return None
    n = int(code)
    return PALETTE[n] if n < len(PALETTE) else None


class _State:
    def __init__(self):
        self.reset()

    def reset(self) -> None:
        self.bold = False
        self.italic = False
        self.underline = False
        self.strike = False
        self.monospace = False
        self.reverse = False
        self.fg: str | None = None
        self.bg: str | None = None

    def wrap(self, text: str) -> str:
        out = html.escape(text, quote=False)
        for flag, tag in reversed(TAGS):
            on = getattr(self, flag) or (flag == "italic" and self.reverse)
            if on:
                out = f"<{tag}>{out}</{tag}>"
        styles = []
        if self.fg:
            styles.append(f"color: {self.fg}")
        if self.bg:
            styles.append(f"background-color: {self.bg}")
        if styles:
            out = f'<span style="{"; ".join(styles)}">{out}</span>'
        return out


def convert_formatting(text: str | None) -> str | None:
    """Return `text` as HTML with its IRC formatting codes applied."""
    if text is None:
        return None

    state = _State()
    parts: list[str] = []
    pos = 0
    for m in CONTROL_RE.finditer(text):
        if m.start() > pos:
            parts.append(state.wrap(text[pos:m.start()]))
        pos = m.end()

        code = m.group(0)[0]
        if code == RESET:
            state.reset()
        elif code == COLOUR:
            fg, bg = m.group(1), m.group(2)
            if fg is None:
                state.fg = state.bg = None
            else:
                state.fg = _colour(fg)
                if bg is not None:
                    state.bg = _colour(bg)
        elif code == HEX_COLOUR:
            # Hex colours are rare; drop them rather than guess.
            continue
        else:
            flag = TOGGLES[code]
            setattr(state, flag, not getattr(state, flag))

    if pos < len(text):
        parts.append(state.wrap(text[pos:]))
    return "".join(parts)
