import sys
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Color(Enum):
    """color tags a report line can carry, named the way the cluster names health"""

    RED = "red"
    GREEN = "green"
    YELLOW = "yellow"
    BLUE = "blue"
    MAGENTA = "magenta"
    CYAN = "cyan"
    WHITE = "white"
    DEFAULT = "default"

    def wrap(self, text):
        return "\033[{}m{}\033[0m".format(ANSI_CODES[self], text)


ANSI_CODES = {
    Color.RED: 31,
    Color.GREEN: 32,
    Color.YELLOW: 33,
    Color.BLUE: 34,
    Color.MAGENTA: 35,
    Color.CYAN: 36,
    Color.WHITE: 37,
    Color.DEFAULT: 39,
}

# cycled one color per character in nicolai mode
RAINBOW = [
    Color.RED,
    Color.YELLOW,
    Color.GREEN,
    Color.BLUE,
    Color.MAGENTA,
    Color.BLUE,
    Color.CYAN,
    Color.WHITE,
]

HEALTH_STATUSES = ("green", "yellow", "red")


def color_for_status(status):
    """
    cluster health status doubles as the color it is shown in
    anything other than green/yellow/red gets no color at all
    """
    if status in HEALTH_STATUSES:
        return Color(status)
    return None


def rainbow(text):
    palette = []
    out = ""
    for char in text:
        if not palette:
            palette = list(RAINBOW)
        out += palette.pop(0).wrap(char)
    return out


def as_text(value):
    # json null / missing fields render as blank
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


@dataclass(frozen=True)
class ReportLine:
    value: str = ""
    key: Optional[str] = None
    kv: bool = False
    indent: int = 0
    color: Optional[Color] = None
    # 0 means always shown, otherwise the -v count needed to see it
    level: int = 0

    def __post_init__(self):
        if self.kv and self.key is None:
            raise ValueError("key/value report line needs a key")
        if self.indent < 0:
            raise ValueError("indent must not be negative")


def line(value, **kwargs):
    return ReportLine(value=as_text(value), **kwargs)


def kv(key, value, **kwargs):
    return ReportLine(key=key, value=as_text(value), kv=True, **kwargs)


class OutputSink:
    """
    writes report lines to the terminal

    applies verbosity gating (bypassed entirely in debug mode), value coloring,
    the key/value separator and two-space indentation
    """

    def __init__(self, config, stream=None):
        self.config = config
        self.stream = stream if stream is not None else sys.stdout

    def visible(self, report_line):
        if self.config.debug:
            return True
        return self.config.verbose >= report_line.level

    def colorize(self, color, text):
        if self.config.nicolai:
            return rainbow(text)
        if color is not None and self.config.color:
            return color.wrap(text)
        return text

    def format_line(self, report_line):
        # only the value is ever colored, never the key
        value = self.colorize(report_line.color, report_line.value)
        if report_line.kv:
            text = self.config.kv_separator.join([report_line.key, value])
        else:
            text = value
        return "  " * report_line.indent + text

    def render(self, lines, debug_pass=False):
        if debug_pass and not self.config.debug:
            return
        for report_line in lines:
            if not self.visible(report_line):
                continue
            self.stream.write(self.format_line(report_line) + "\n")

    def clear(self, count=1):
        self.stream.write("\n" * count)

    def emit(self, *messages, color=None):
        self.render([line(msg, color=color) for msg in messages])

    def debug(self, *messages):
        self.render([line(msg) for msg in messages], debug_pass=True)
