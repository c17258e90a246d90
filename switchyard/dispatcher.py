"""
Switchyard dispatcher: register multi-word sub-commands and route argument vectors to them.

What this module provides
- Dispatcher: owns every registered Command keyed by its path (a tuple of
  whitespace-split tokens) and implements:
  • add_command(path, command): register or replace a command.
  • resolve(args): pick the command whose path matches the positional tokens.
  • parse_options(args, declared): best-effort extraction of typed options.
  • print_help(): Rich-based listing of paths and their options.
  • run(args): the top-level orchestration (help, resolve, parse, execute).

- invoke(dispatcher, prompt): convenience runner reading sys.argv[1:], a
  shell-like string, or an iterable of tokens.

Routing policy
- Tokens starting with '-' are dropped before matching; the remaining tokens
  are compared position by position against each registered path.
- Candidates are scanned longest path first, and equal lengths keep
  registration order. With "git" and "git remote" registered, the vector
  ["git", "remote", "-v"] always reaches "git remote".
- A flag value that does not start with '-' is indistinguishable from a path
  token: ["test", "--name", "one"] matches "test one" when registered.

Parsing policy
- Parsing never fails. Unknown dash tokens are reported with an
  UnknownSwitchWarning and skipped; missing or unparseable values fall back to
  the declared default (FallbackValueWarning), except Bool flags which fall
  back to True silently.
- The same flag given twice keeps the later value.

Error surface
- UnknownCommandError when nothing matches (raised, or printed and exit(1)
  in shell mode). A command's own exception propagates untouched.
"""
import difflib
import logging
import os.path
import shlex
import sys
from collections import defaultdict
from collections.abc import Iterable

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .commands import Command
from .faults import *
from .options import Bool, _convert, _fallback
from .utils import *

logger = logging.getLogger(__name__)

HELP_FLAGS = ("-h", "--help")


def _ordinal(number):
    """
    Return a human-friendly ordinal label for a 1-based position.

    - 1..10 are rendered as words ("first"…"tenth").
    - Other numbers use numeric ordinals with correct English suffixes.
    """
    try:
        return {
            1: "first",
            2: "second",
            3: "third",
            4: "fourth",
            5: "fifth",
            6: "sixth",
            7: "seventh",
            8: "eighth",
            9: "ninth",
            10: "tenth",
        }[number]
    except KeyError:
        pass

    # 11th, 12th, 13th (and 111th, 112th, 113th, …)
    if 10 < number % 100 < 20:
        return f"{number}th"

    return f'{number}%s' % {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")


class Dispatcher:
    """
    Registry of sub-commands and the router that runs them.

    Parameters
    - name: str | Unset
      Program name used in help and fault headers (defaults to basename of sys.argv[0]).
    - descr: str | Unset
      Optional paragraph printed under the help header.
    - shell: bool
      When True, faults are rendered on stderr instead of raised/warned, and an
      unknown command exits the process with status 1.
    - fancy: bool
      Wrap help and faults in Rich panels.
    - colorful: bool
      Apply the palette (overridable through __styles__ in __main__).

    Lifecycle
    - Register every command first, then call run() as many times as needed.
      Each run parses a fresh options mapping; nothing is kept between runs.
    """

    name = mirror("name")
    descr = mirror("descr")
    commands = mirror("commands")
    shell = mirror("shell")
    fancy = mirror("fancy")
    colorful = mirror("colorful")

    def __init__(self, name=Unset, descr=Unset, *, shell=False, fancy=False, colorful=False):
        name = coalesce(name, os.path.basename(sys.argv[0]))
        if not isinstance(name, str):
            raise TypeError("dispatcher 'name' must be a string")
        if not isinstance(descr, str | Unset):
            raise TypeError("dispatcher 'descr' must be a string")
        for field, flag in (("shell", shell), ("fancy", fancy), ("colorful", colorful)):
            if not isinstance(flag, bool):
                raise TypeError(f"dispatcher {field!r} must be a boolean")
        self._name = name
        self._descr = coalesce(descr)
        self._shell = shell
        self._fancy = fancy
        self._colorful = colorful
        self._commands = {}

    def __repr__(self):
        return "dispatcher(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())

    def __rich_repr__(self):
        yield "name", self.name
        yield "commands", [" ".join(path) for path in self._commands]
        yield "shell", self.shell
        yield "fancy", self.fancy
        yield "colorful", self.colorful

    def add_command(self, path, command, /):
        """
        Register `command` under the whitespace-split tokens of `path`.

        Rules
        - "test one" and "  test   one " register the same path ("test", "one").
        - Registering an existing path replaces the previous command.
        - The empty path matches every vector and therefore acts as a fallback.

        Raises
        - TypeError when path is not a string or command is not a Command.
        """
        if not isinstance(path, str):
            raise TypeError("add_command() path must be a string")
        if not isinstance(command, Command):
            raise TypeError("add_command() command must be a command instance")
        key = tuple(path.split())
        if key in self._commands:
            logger.debug("replacing command registered at %r", " ".join(key))
        self._commands[key] = command

    def resolve(self, args, /):
        """
        Return the command whose path matches the positional tokens of `args`, or None.

        Steps
        - drop every token starting with '-';
        - scan registered paths longest first (ties keep registration order);
        - skip paths longer than the remaining tokens;
        - the first path equal to the leading remaining tokens wins.
        """
        positionals = [token for token in args if not token.startswith("-")]

        for path in sorted(self._commands, key=len, reverse=True):
            if len(path) > len(positionals):
                logger.debug("skipping %r: longer than %d positional tokens", " ".join(path), len(positionals))
                continue
            if list(path) == positionals[:len(path)]:
                logger.debug("matched %r", " ".join(path))
                return self._commands[path]
            logger.debug("%r does not match %r", " ".join(path), " ".join(positionals[:len(path)]))

        logger.debug("no command matched %r", positionals)
        return None

    def parse_options(self, args, declared, /):
        """
        Extract the declared options present in `args`.

        For every token starting with '-':
        - find the declared descriptor spelling it exactly ('-s' or '--long');
          if none, warn and move on;
        - read the next token (absent at the end of the vector) and coerce it by
          the variant of the descriptor's default;
        - store descriptor → value (a repeated flag keeps its last value).

        Returns
        - dict[OptionDescriptor, OptionValue] holding only the flags present.
        """
        declared = tuple(declared)
        result = {}

        for position, token in enumerate(args):
            if not token.startswith("-"):
                continue

            descriptor = next((option for option in declared if option.matches(token)), None)
            if descriptor is None:
                logger.debug("no option declared for %r", token)
                previous = args[position - 1] if position else None
                owner = next((option for option in declared if option.matches(previous)), None) if previous else None
                if owner is not None and _convert(token, owner.default) is not Unset:
                    message = "%r at %s position was read as the value of %r and is not an option of its own"
                    message %= (token, _ordinal(position + 1), previous)
                else:
                    message = "unknown option %r at %s position is ignored" % (token, _ordinal(position + 1))
                self.trigger(UnknownSwitchWarning(
                    message,
                    hint="run '%s --help' to see the options of every command" % self.name,
                    token=token,
                    index=position,
                    docs=getdoc(FaultCode.UNKNOWN_SWITCH)
                ))
                continue

            value = args[position + 1] if position + 1 < len(args) else None
            converted = _convert(value, descriptor.default)
            if converted is Unset:
                converted = _fallback(descriptor.default)
                if not isinstance(descriptor.default, Bool):
                    if value is None:
                        message = "option %r at %s position has no value, using %r"
                    else:
                        message = "option %r at %s position has an invalid value, using %r"
                    self.trigger(FallbackValueWarning(
                        message % (token, _ordinal(position + 1), converted.value),
                        hint="pass a value after the option (for example: %s <value>)" % token,
                        token=token,
                        value=value,
                        index=position,
                        docs=getdoc(FaultCode.FALLBACK_VALUE)
                    ))
            result[descriptor] = converted

        return result

    def _helper(self):
        """
        Build the help renderable.

        Layout
            Available commands:
            <path>[  <descr>]
              -<short>, --<long>: <description>

        Palette keys
        - header, program-name, description-section, path, command-description,
          option-name, option-description, panel-title
        - define a mapping named __styles__ in __main__ to override any entry.
        """
        styles = defaultdict(str, {
            "header": "bold #FFFFFF",  # pure white headline
            "program-name": "bold #FF4D94",  # magenta-pink brand pop
            "description-section": "italic #A3A3A3",  # neutral gray
            "path": "bold #36C5F0",  # sky-blue routes
            "command-description": "#9CA3AF",  # muted gray
            "option-name": "bold #00E6FF",  # cyan options
            "option-description": "#9CA3AF",  # muted gray
            "panel-title": "bold #FF4D94",  # magenta branding
        } | getattr(__import__("__main__"), "__styles__", {}))

        def styler(style):
            return styles[style] if self.colorful else ""

        renders = []

        if self.descr:
            renders.append(Text(self.descr, styler("description-section")).append("\n"))

        listing = Text("Available commands:", styler("header"))
        for path, command in self._commands.items():
            listing.append("\n").append(" ".join(path), styler("path"))
            if command.descr:
                summary = str(command.descr).strip().partition("\n")[0]
                listing.append("  ").append(summary, styler("command-description"))
            for option in command.options():
                short, long = option.flags
                listing.append("\n  ")
                listing.append(short, styler("option-name")).append(", ")
                listing.append(long, styler("option-name")).append(": ")
                listing.append(option.description, styler("option-description"))
        renders.append(listing)

        renderable = Group(*renders)

        if self.fancy:
            renderable = Panel(
                renderable,
                title=Text.assemble("[", " ", f"{self.name} HELP".upper(), " ", "]", style=styler("panel-title")),
                title_align="left",
            )

        return renderable

    def print_help(self, console=Unset, /):
        """
        Print the help listing (to stdout unless another rich Console is given).
        """
        console = coalesce(console, Console())
        console.print(self._helper(), soft_wrap=not self.fancy)

    def trigger(self, fault, /, **options):
        """
        Surface `fault` with this dispatcher's runtime flags merged in.
        """
        trigger(fault, **options, tool=self, shell=self.shell, fancy=self.fancy, colorful=self.colorful)

    def run(self, args, /):
        """
        Route `args` to a registered command and execute it.

        Behavior
        - empty args, or args[0] in ('-h', '--help'): print help, dispatch nothing, return None;
        - otherwise resolve the command (UnknownCommandError when none matches),
          parse its declared options and return command.run(args, options) unchanged.

        Raises
        - TypeError when args is not an iterable of strings.
        - UnknownCommandError when no path matches (non-shell mode).
        - whatever the command raises.
        """
        if isinstance(args, str) or not isinstance(args, Iterable):
            raise TypeError("run() argument must be an iterable of strings")
        args = list(args)
        if not all(isinstance(token, str) for token in args):
            raise TypeError("run() argument must be an iterable of strings")

        if not args or args[0] in HELP_FLAGS:
            self.print_help()
            return None

        command = self.resolve(args)
        if command is None:
            positionals = " ".join(token for token in args if not token.startswith("-"))
            suggestions = difflib.get_close_matches(positionals, [" ".join(path) for path in self._commands], 3)
            try:
                hint = "did you mean %r? you can also run '%s --help' to see all commands" % (suggestions[0], self.name)
            except IndexError:
                hint = "try '%s --help' to see all available commands" % self.name
            if self.shell:
                self.print_help(Console(stderr=True))
            return self.trigger(UnknownCommandError(
                "no command matches %r" % positionals,
                hint=hint,
                args=tuple(args),
                suggestions=suggestions,
                docs=getdoc(FaultCode.UNKNOWN_COMMAND)
            ))

        options = self.parse_options(args, command.options())
        return command.run(args, options)


def invoke(dispatcher, prompt=Unset, /):
    """
    Convenience runner for a Dispatcher.

    Parameters
    - dispatcher: Dispatcher
    - prompt:
      • Unset: read sys.argv[1:].
      • str: split with shlex.split.
      • Iterable[str]: use items as tokens.

    Returns
    - whatever dispatcher.run() returns.
    """
    if not isinstance(dispatcher, Dispatcher):
        raise TypeError("invoke() first argument must be a dispatcher")
    if prompt is Unset:
        tokens = sys.argv[1:]
    elif isinstance(prompt, str):
        tokens = shlex.split(prompt)
    else:
        tokens = prompt
    return dispatcher.run(tokens)


__all__ = (
    "Dispatcher",
    "invoke",
)
