"""
Optkit help rendering.

Layout
    <help string>
    usage: <program> <custom help> [<positional help>]

    <group>
      -s, --long arg        description (default: x)
          --other [=arg(=implicit)]
                            description wrapped under the description column

- The option column is "  -s, --long", "      --long" or "  -s", followed by the
  argument label ("arg" unless arg_help is given): nothing for booleans,
  " [=ARG(=implicit)]" when an implicit value exists, " ARG" otherwise.
- The column is as wide as the longest entry, capped at 30, plus a gap of 2;
  wider entries push their description to the next line.
- Descriptions get " (default: X)" unless they are booleans defaulting to "false";
  an empty default shows (default: ""). They wrap at the remaining width, never
  narrower than 10 columns. Tabs use 8-column stops with tab expansion, a single
  column without.
- Options bound to positional arguments are listed only with show_positional_help.

Palette keys (colorful=True; override through __styles__ in __main__)
- usage-label, program-name, usage-section, description-section
- group-label, option-name, metavar, option-description, panel-title
"""
import io
from collections import defaultdict

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from .utils import *

OPTION_LONGEST = 30
OPTION_DESC_GAP = 2


def render(options, groups=(), /, *, colorful=False, fancy=False, width=Unset, strip=False):
    """
    Build the help renderable of a registry.

    Parameters
    - options: the Options registry.
    - groups: group names to show, in this order; all groups (sorted) when empty.
      Unknown names are skipped.
    - colorful / fancy: palette styling / enclosing panel.
    - width: overrides the registry width.
    - strip: drop the trailing newline (for printing).

    Returns
    - rich.text.Text (or rich.panel.Panel when fancy).
    """
    settings = options.settings
    width = coalesce(width, settings["width"])
    console = Console(file=io.StringIO(), color_system=None, width=max(width, 1))

    styles = defaultdict(str, {
        "usage-label": "bold #00E6FF",
        "program-name": "bold #FF4D94",
        "usage-section": "bold #36C5F0",
        "description-section": "italic #A3A3A3",
        "group-label": "bold #FFFFFF",
        "option-name": "bold #00E6FF",
        "metavar": "bold #FFD600",
        "option-description": "#9CA3AF",
        "panel-title": "bold #FF4D94",
    } | getattr(__import__("__main__"), "__styles__", {}))

    def styler(style):
        return styles[style] if colorful else ""

    positional = set(options.positional)

    def visible(option):
        if settings["show_positional_help"]:
            return True
        return option.long not in positional and option.short not in positional

    def column(option):
        text = Text("  ")
        if option.short:
            text.append("-" + option.short, styler("option-name"))
            if option.long:
                text.append(",")
        else:
            text.append("   ")
        if option.long:
            text.append(" ").append("--" + option.long, styler("option-name"))

        if not option.is_boolean:
            label = option.arg_help or "arg"
            if option.has_implicit:
                text.append(" [=").append(label, styler("metavar"))
                text.append("(=").append(option.implicit, styler("metavar")).append(")]")
            else:
                text.append(" ").append(label, styler("metavar"))
        return text

    def description(option):
        descr = option.descr
        if option.has_default and (not option.is_boolean or option.default != "false"):
            descr += " (default: %s)" % (option.default or '""')
        return Text(descr, styler("option-description"))

    def section(name):
        entries = [option for option in options.group_help(name).options if visible(option)]
        columns = [column(option) for option in entries]

        longest = min(max(map(len, columns), default=0), OPTION_LONGEST)
        indent = longest + OPTION_DESC_GAP
        allowed = width - indent if width > 10 + indent else 10

        text = Text()
        if name:
            text.append(name, styler("group-label")).append("\n")

        for option, entry in zip(entries, columns):
            text.append(entry)
            if len(entry) > longest:
                text.append("\n" + " " * indent)
            else:
                text.append(" " * (indent - len(entry)))

            lines = description(option).wrap(console, allowed, tab_size=8 if settings["tab_expansion"] else 1)
            for index, line in enumerate(lines):
                line.rstrip()
                if index:
                    text.append("\n" + " " * indent)
                text.append(line)
            text.append("\n")
        return text

    renders = Text()
    if settings["help_string"]:
        renders.append(settings["help_string"], styler("description-section")).append("\n")

    renders.append("usage", styler("usage-label")).append(": ")
    renders.append(settings["program"], styler("program-name")).append(" ")
    renders.append(settings["custom_help"], styler("usage-section"))
    if positional and settings["positional_help"]:
        renders.append(" ").append(settings["positional_help"], styler("usage-section"))
    renders.append("\n\n")

    names = [name for name in (groups or options.groups()) if name in options.groups()]
    for index, name in enumerate(names):
        renders.append(section(name))
        if index < len(names) - 1:
            renders.append("\n")

    if strip or fancy:
        renders.rstrip()

    if fancy:
        return Panel(
            renders,
            title=Text.assemble("[ ", "%s HELP" % settings["program"].upper(), " ]", style=styler("panel-title")),
            title_align="left",
        )
    return renders


__all__ = (
    "OPTION_LONGEST",
    "OPTION_DESC_GAP",
    "render",
)
