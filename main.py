from rich.pretty import pprint

from argospec import *


class Verbosity:
    verbose = Option("-v", "--verbose", type=bool, descr="talk more")


@command(name="status", description="show the working tree status")
class Status:
    short = Option("-s", "--short", type=bool, descr="give the output in the short format")


@command(
    name="tool",
    version="tool 0.1.0",
    footer="see 'tool help <command>' for more",
    subcommands=[Status],
)
class Tool:
    output = Option("-o", "--output", descr="where to write")
    logging = Mixin(Verbosity)
    files = Positional(nargs="*", descr="inputs")


if __name__ == '__main__':
    spec = build(Tool, shell=True, colorful=True)
    pprint(spec)
    spec.print_help()
