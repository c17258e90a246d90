"""
Switchyard faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing issue
  (errors and warnings). Codes are grouped by domain to keep logs/searches predictable.
- CommandException / CommandWarning: base types that carry message + options and
  know how to render themselves in a friendly, lowercased, and actionable way.
- trigger(): central entry point to surface any fault (respecting shell/fancy/colorful).
- getdoc(): optional description lookup for a code from the host application.

Taxonomy
- errors: exactly two sources reach the caller.
  • UnknownCommandError: no registered path matches the argument vector.
  • CommandError: raised by a command's own run(); the dispatcher passes it through untouched.
- warnings: best-effort parsing never fails, it only leaves a note.
  • UnknownSwitchWarning: a dash token that no declared option recognizes.
  • FallbackValueWarning: a value token was missing or unparseable and the default was used.

Integration
- The dispatcher collects context while routing/parsing and calls trigger(fault, **ctx).
- In non-shell mode, exceptions are raised and warnings go through the warnings module;
  in shell mode, both are rendered via rich on stderr and errors exit with status 1.
"""
import inspect
import os.path
import sys
import warnings
from abc import ABC
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, coalesce

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the dispatcher (stable identifiers).

    grouping (by high-level domain)
    - routing (1110x)
      • UNKNOWN_COMMAND
    - delegated errors (1113x)
      • DELEGATED_ERROR
    - parsing notes, never fatal (1211x)
      • UNKNOWN_SWITCH, FALLBACK_VALUE

    rationale
    - codes are discoverable (searchable in logs and docs) and normalized to a string
      via normalize() so hosts can remap them if desired (e.g., to shorter labels).
    """
    # --- routing errors (11xxx) ---
    UNKNOWN_COMMAND             = 11101

    # --- delegated errors (11xxx) ---
    DELEGATED_ERROR             = 11131

    # --- warnings (12xxx) ---
    UNKNOWN_SWITCH              = 12111
    FALLBACK_VALUE              = 12112

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _render(fault, palette, kind):
    """
    shared rich layout for exceptions and warnings.

    layout
    - header: "[ prog — code | title ]"
    - body: the message, then " → hint" when a hint is present.
    - fancy: header becomes the title of a Panel around the body.
    """
    main = __import__("__main__")
    options = fault.options
    colorful = options.get("colorful", False)

    styles = defaultdict(str, palette | getattr(main, "__styles__", {}))

    def styler(style):
        return styles[style] if colorful else ""

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if not colorful:
            return Text(str(fragment))
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), style)

    tool = options.get("tool")
    name = getattr(tool, "name", None) or os.path.basename(sys.argv[0])
    prog = text(getattr(main, "__prog__", name), styler("prog-name"))

    header = Text.assemble(
        "[ ",
        prog,
        " — ",
        text(fault.code.normalize(), styler("code")),
        " | ",
        text(fault.title.title(), styler(f"{kind}-title")),
        " ]"
    )
    message = text(coalesce(fault.message, ""), styler(f"{kind}-message"))
    renders = [message]
    if hint := options.get("hint"):
        renders.append(Text.assemble(text(" → ", styler("hint-arrow")), text(hint, styler("hint"))))

    if options.get("fancy", False):
        return Panel(Group(*renders), title=header, title_align="left")

    return Group(header, *renders)


class CommandException(Exception):
    """
    base error carrying a message and read-only options.

    recognized options
    - title, code: override the class defaults shown in the header.
    - hint: one actionable sentence rendered after an arrow.
    - docs: optional long description (see getdoc()).
    - tool, shell, fancy, colorful: runtime context merged by trigger().
    - anything else is kept as diagnostic context (e.g., args, suggestions).
    """
    title = "command error"
    code = FaultCode.DELEGATED_ERROR

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(coalesce(message, ""))
        self.message = message
        self.options = MappingProxyType(options)
        self.title = options.get("title", type(self).title)
        self.code = options.get("code", type(self).code)

    def __str__(self):
        return coalesce(self.message, "")

    def __rich__(self):
        return _render(self, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        }, "error")

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class UnknownCommandError(CommandException):
    title = "unknown command"
    code = FaultCode.UNKNOWN_COMMAND


class CommandError(CommandException):
    title = "command failed"
    code = FaultCode.DELEGATED_ERROR


class CommandWarning(ABC, Warning):
    """
    base warning carrying a message and read-only options (see CommandException).
    """
    title = "command warning"
    code = FaultCode.UNKNOWN_SWITCH

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(coalesce(message, ""))
        self.message = message
        self.options = MappingProxyType(options)
        self.title = options.get("title", type(self).title)
        self.code = options.get("code", type(self).code)

    def __str__(self):
        return coalesce(self.message, "")

    def __rich__(self):
        return _render(self, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #FFB400",  # amber fault code for warnings
            "warning-title": "bold #FFC2E0",  # softer pinky title for warnings

            # body
            "warning-message": "#D6D6DE",  # slightly lighter gray body
            "hint-arrow": "#B8EFAF dim",  # softer green arrow
            "hint": "italic #B8EFAF",  # softer green hint text
        }, "warning")

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            return warnings.warn(self, stacklevel=len(inspect.stack()))
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class UnknownSwitchWarning(CommandWarning):
    title = "unknown option"
    code = FaultCode.UNKNOWN_SWITCH


class FallbackValueWarning(CommandWarning):
    title = "default value used"
    code = FaultCode.FALLBACK_VALUE


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via __replace__(**options) before triggering.
    - in shell mode, rendering happens via rich console; otherwise, exceptions are raised
      and warnings are emitted through warnings.warn.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    fault.__replace__(**options).__trigger__()


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    lookup
    - the host application may expose a __docs__ mapping in __main__ where keys
      are FaultCode instances and values are short documentation strings.
    - when not found, returns None (renderers treat docs as optional).
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "CommandException",
    "UnknownCommandError",
    "CommandError",
    "CommandWarning",
    "UnknownSwitchWarning",
    "FallbackValueWarning",
    "FaultCode",
    "trigger",
    "getdoc",
)
