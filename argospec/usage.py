"""
Argospec help payload: synopsis, ordered sections and their rendering.

Sections (in this order, each emitted with its heading only when its content
is non-empty)
- header            header_heading + header lines
- synopsis          synopsis_heading + synopsis lines
- description       description_heading + description lines
- parameters        parameter_list_heading + one row per visible positional
- options           option_list_heading + one row per visible option
- commands          command_list_heading + one row per subcommand
- footer            footer_heading + footer lines

Headings are emitted verbatim (they carry their own line breaks, e.g.
"Commands:\\n"); every content line ends with a line break. The default
synopsis heading "Usage: " therefore shares its line with the synopsis.

Synopsis
- custom_synopsis lines, verbatim, when any are declared;
- otherwise "<qualified name> [option tokens] [positional tokens] [COMMAND]",
  options sorted by identifier when sort_options is set, wrapped at `width`
  with continuation lines indented under the first token;
- abbreviate_synopsis collapses the option tokens into "[OPTIONS]".

Palette keys (override through a __styles__ mapping on __main__)
- heading, synopsis, program-name, header-section, description-section,
  footer-section, option-name, metavar, required-marker,
  argument-description, default-value, command-name, command-description,
  panel-title.
"""
from collections import defaultdict, namedtuple

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

Section = namedtuple("Section", ("kind", "heading", "lines"))
Section.__doc__ = """
One block of the help payload.

- kind: "header", "synopsis", "description", "parameters", "options",
  "commands" or "footer"
- heading: the raw heading string (possibly empty)
- lines: the content lines, without trailing line breaks
"""


def _sortkey(option):
    return min(option.names, key=len).lstrip("-").lower()


def _visible(elements, /):
    return [element for element in elements if not element.hidden]


def _arity(label, nargs, /):
    match nargs:
        case "*":
            return f"[{label}]..."
        case "+":
            return f"{label}..."
        case "?":
            return f"[{label}]"
        case int():
            return " ".join([label] * nargs)
    return label


def _option_token(spec, option, /):
    leading = min(option.names, key=len)
    if option.flag:
        return leading if option.required else f"[{leading}]"
    token = f"{leading}{spec.separator}{option.metavar}"
    if isinstance(option.nargs, int) and option.nargs > 1:
        token = " ".join([token, *[option.metavar] * (option.nargs - 1)])
    if not option.required:
        token = f"[{token}]"
    if option.nargs in ("*", "+"):
        token = f"{token}..."
    return token


def _ordered(spec, /):
    options = _visible(spec.options)
    if spec.sort_options:
        options.sort(key=_sortkey)
    return options


def synopsis(spec, /, *, width=80):
    """
    Return the synopsis lines of `spec` (custom lines verbatim, else generated).
    """
    if spec.custom_synopsis:
        return tuple(spec.custom_synopsis)

    tokens = []
    if options := _ordered(spec):
        if spec.abbreviate_synopsis:
            tokens.append("[OPTIONS]")
        else:
            tokens.extend(_option_token(spec, option) for option in options)
    tokens.extend(_arity(positional.label, positional.nargs) for positional in _visible(spec.positionals))
    if spec.subcommands:
        tokens.append("[COMMAND]")

    lines = []
    line, count = spec.qualified_name, 0
    indent = " " * (len(line) + 1)
    for token in tokens:
        if count and len(line) + 1 + len(token) > width:
            lines.append(line)
            line, count = indent + token, 1
        else:
            line, count = f"{line} {token}", count + 1
    lines.append(line)
    return tuple(lines)


def _option_row(spec, option, /):
    marker = spec.required_option_marker if option.required else " "
    shorts = sorted((name for name in option.names if not name.startswith("--")), key=len)
    longs = sorted((name for name in option.names if name.startswith("--")), key=len)
    names = ", ".join([*shorts, *longs])
    if not option.flag:
        names += f"{spec.separator}{option.metavar}"
    return f"{marker} {names}"


def _positional_row(positional, /):
    return f"  {_arity(positional.label, positional.nargs)}"


def _describe(spec, rows, width, /):
    """
    Lay out (row, element) pairs as a two-column list.
    """
    if not rows:
        return ()
    column = max(len(row) for row, _ in rows) + 2
    console = Console(width=width)
    lines = []
    for row, element in rows:
        texts = []
        if element.descr:
            wrapped = Text(element.descr).wrap(console, max(width - column, 20))
            texts.extend(line.plain.rstrip() for line in wrapped)
        if spec.show_default_values and element.default is not None and not getattr(element, "flag", False):
            texts.append(f"Default: {element.default}")
        if not texts:
            lines.append(row)
            continue
        lines.append(row.ljust(column) + texts[0])
        lines.extend(" " * column + text for text in texts[1:])
    return tuple(lines)


def _summary(child, /):
    if child.header:
        return child.header[0]
    if child.description:
        return child.description[0]
    return ""


def sections(spec, /, *, width=80):
    """
    Return the ordered, non-empty help sections of `spec`.
    """
    positionals = [(_positional_row(positional), positional) for positional in _visible(spec.positionals)]
    options = [(_option_row(spec, option), option) for option in _ordered(spec)]
    # one description column shared by both lists
    column = max((len(row) for row, _ in (*positionals, *options)), default=0)
    parameters = _describe(spec, [(row.ljust(column), element) for row, element in positionals], width)
    options = _describe(spec, [(row.ljust(column), element) for row, element in options], width)
    parameters = tuple(line.rstrip() for line in parameters)
    options = tuple(line.rstrip() for line in options)

    commands = ()
    if spec.subcommands:
        column = max(map(len, spec.subcommands)) + 2
        commands = tuple(
            f"  {name.ljust(column)}{summary}".rstrip() if (summary := _summary(child)) else f"  {name}"
            for name, child in spec.subcommands.items()
        )

    candidates = (
        Section("header", spec.header_heading, tuple(spec.header)),
        Section("synopsis", spec.synopsis_heading, synopsis(spec, width=width)),
        Section("description", spec.description_heading, tuple(spec.description)),
        Section("parameters", spec.parameter_list_heading, parameters),
        Section("options", spec.option_list_heading, options),
        Section("commands", spec.command_list_heading, commands),
        Section("footer", spec.footer_heading, tuple(spec.footer)),
    )
    return tuple(section for section in candidates if section.lines)


def _palette():
    return defaultdict(str, {
        "heading": "bold #FFFFFF",
        "synopsis": "bold #36C5F0",
        "program-name": "bold #FF4D94",
        "header-section": "bold #E5E7EB",
        "description-section": "italic #A3A3A3",
        "footer-section": "#737373",
        "option-name": "bold #00E6FF",
        "metavar": "bold #FFD600",
        "required-marker": "bold #EF4444",
        "argument-description": "#9CA3AF",
        "default-value": "italic #9CA3AF",
        "command-name": "bold #36C5F0",
        "command-description": "#9CA3AF",
        "panel-title": "bold #FF4D94",
    } | getattr(__import__("__main__"), "__styles__", {}))


def render(spec, /, *, colorful=False, width=80):
    """
    Render the help sections of `spec` into a rich Text.

    The plain text of the result is exactly usage_string(spec, width=width).
    """
    styles = _palette()

    def styler(style):
        return styles[style] if colorful else ""

    document = Text()
    for section in sections(spec, width=width):
        document.append(section.heading, styler("heading"))
        match section.kind:
            case "synopsis":
                for index, line in enumerate(section.lines):
                    if index == 0 and not spec.custom_synopsis and line.startswith(name := spec.qualified_name):
                        document.append(name, styler("program-name"))
                        document.append(line[len(name):], styler("synopsis"))
                    else:
                        document.append(line, styler("synopsis"))
                    document.append("\n")
            case "parameters" | "options":
                for line in section.lines:
                    line = Text(line, styler("argument-description"))
                    if colorful:
                        line.highlight_regex(r"(?<=[\s,])--?[^\s,=]+", styler("option-name"))
                        line.highlight_regex(r"<[^>]+>", styler("metavar"))
                        line.highlight_regex(r"Default: .*$", styler("default-value"))
                        if line.plain.startswith(marker := spec.required_option_marker):
                            line.stylize(styler("required-marker"), 0, len(marker))
                    document.append(line).append("\n")
            case "commands":
                for line in section.lines:
                    name = line.split()[0]
                    document.append(line[:len(line) - len(line.lstrip())])
                    document.append(name, styler("command-name"))
                    document.append(line.lstrip()[len(name):], styler("command-description"))
                    document.append("\n")
            case kind:
                for line in section.lines:
                    document.append(line, styler(f"{kind}-section")).append("\n")
    return document


def usage_string(spec, /, *, width=80):
    """
    Return the help text of `spec` as a plain string.
    """
    return render(spec, colorful=False, width=width).plain


def print_help(spec, /, *, fancy=False, colorful=False, width=None, console=None):
    """
    Print the help text of `spec` through a rich Console.

    - fancy: wrap the help in a titled panel.
    - colorful: apply the palette (see module docstring).
    - width: layout width; defaults to the console width (minus panel gutters).
    """
    console = console or Console()
    if not width:
        width = console.width - 4 * bool(fancy)
    renderable = render(spec, colorful=colorful, width=width)
    renderable.rstrip()

    if fancy:
        styles = _palette()
        renderable = Panel(
            renderable,
            title=Text.assemble(
                "[", " ", f"{spec.qualified_name} HELP".upper(), " ", "]",
                style=styles["panel-title"] if colorful else "",
            ),
            title_align="left",
        )

    console.print(renderable)


__all__ = (
    "Section",
    "synopsis",
    "sections",
    "render",
    "usage_string",
    "print_help",
)
