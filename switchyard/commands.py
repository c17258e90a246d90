"""
Switchyard command layer: the unit of work a dispatcher routes to.

What this module provides
- Command: abstract base for sub-commands.
  • options(): the option surface the dispatcher should recognize (default: none).
  • run(args, options): does the work. Receives the entire original argument
    vector (path tokens and unknown flags included) and the parsed options
    mapping. Returning normally means success; raising (conventionally
    CommandError) means failure.
  • descr: optional one-line description shown next to the path in help.

- command(...): wrap a plain callable `fn(args, options)` into a Command,
  either directly or as a decorator.

Quick start
    from switchyard import Dispatcher, OptionDescriptor, Bool, command, find_option

    @command(options=[OptionDescriptor("n", "no-newline", Bool(False), "do not output the trailing newline")])
    def echo(args, options):
        '''display a line of text'''
        end = "" if find_option(options, "--no-newline") == Bool(True) else "\\n"
        print(" ".join(args[1:]), end=end)

    dispatcher = Dispatcher()
    dispatcher.add_command("echo", echo)
    dispatcher.run(["echo", "hello"])

Notes
- Side effects (I/O, printing) belong to the command; the dispatcher never
  inspects what run() does or returns.
"""
import inspect
from abc import ABC, abstractmethod
from collections.abc import Iterable

from .options import OptionDescriptor
from .utils import Unset, coalesce, rename


class Command(ABC):
    """
    Abstract sub-command.

    Subclasses implement run() and, when they accept typed flags, options().
    An empty options() means any dash token on the command line is simply
    ignored during parsing.
    """
    descr = None

    def options(self):
        """
        Return the declared OptionDescriptor sequence (default: empty).
        """
        return ()

    @abstractmethod
    def run(self, args, options):
        """
        Execute the command.

        Parameters
        - args: list[str], the full argument vector given to the dispatcher.
        - options: dict[OptionDescriptor, OptionValue], freshly parsed for this call.

        Returns
        - anything; the dispatcher hands it back to its caller unchanged.

        Raises
        - CommandError (or any exception) to signal failure.
        """


class _CallbackCommand(Command):
    """
    Command backed by a plain callable; built by command().
    """

    def __init__(self, callback, options, descr):
        if not isinstance(options, Iterable) or isinstance(options, str):
            raise TypeError("command 'options' must be an iterable of option descriptors")
        options = tuple(options)
        seen = set()
        for option in options:
            if not isinstance(option, OptionDescriptor):
                raise TypeError("command 'options' must be an iterable of option descriptors")
            if option in seen:
                raise ValueError("command 'options' has duplicated flags %s" % ", ".join(option.flags))
            seen.add(option)
        if not isinstance(descr, str | Unset):
            raise TypeError("command 'descr' must be a string")
        self._callback = callback
        self._options = options
        self.descr = coalesce(descr, inspect.getdoc(callback))

    @property
    def callback(self):
        return self._callback

    def options(self):
        return self._options

    def run(self, args, options):
        return self._callback(args, options)

    def __repr__(self):
        name = getattr(self._callback, "__qualname__", type(self._callback).__name__)
        return f"command(callback={name}, options={list(self._options)!r})"


def command(source=Unset, /, *, options=(), descr=Unset):
    """
    Create a Command from a callable, or return a decorator to build it later.

    Invocation modes
    - Direct:     cmd = command(func, options=[...])
    - Decorator:  @command(options=[...])  or plain  @command

    Parameters
    - source: Unset | Callable[[list[str], dict], Any]
      When Unset, a decorator is returned.
    - options: Iterable[OptionDescriptor]
      Declared flags; duplicated flag pairs are rejected (ValueError).
    - descr: str | Unset
      Help description; defaults to the callable's docstring.

    Returns
    - Command | Callable[[Callable], Command]
    """
    @rename("command")
    def wrapper(source, /):
        if not callable(source):
            raise TypeError("@command() must be applied to a callable")
        return _CallbackCommand(source, options, descr)

    return wrapper(source) if source is not Unset else wrapper


__all__ = (
    "Command",
    "command",
)
