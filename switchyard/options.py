r"""
Switchyard option values, descriptors and coercion.

Overview
- Values
  • OptionValue: closed, tagged value type. Exactly four variants exist:
    String(text), Int64(n), UInt64(n), Bool(b).
  • A value is both the declared default of a descriptor and the parsed result
    stored in the options mapping handed to a command.

- Descriptors
  • OptionDescriptor(short, long, default, description): one declared flag.
    The variant of `default` is the only type information; it decides how the
    token after the flag is coerced.

- Helpers
  • coerce(token, default): pure, total conversion of a raw token into a value.
  • find_option(options, flag): read one parsed value by its flag spelling.

Token grammar
- Int64:  [+-]?[0-9]+   within [-2**63, 2**63 - 1]
- UInt64: \+?[0-9]+     within [0, 2**64 - 1]
- Bool:   exactly "true" or "false"
- String: taken verbatim
No trimming is applied: " 5" is not an integer.

Quick example:
    >>> verbose = OptionDescriptor("v", "verbose", Bool(False), "say more")
    >>> coerce("nope", Int64(3))
    Int64(3)
    >>> coerce(None, Bool(False))
    Bool(True)
"""
import re
from abc import ABC

from .utils import Unset, coalesce

INT64_MIN = -2 ** 63
INT64_MAX = 2 ** 63 - 1
UINT64_MAX = 2 ** 64 - 1


class OptionValue(ABC):
    """
    Base of the closed option value family.

    Characteristics
    - Immutable: the payload is fixed at construction (see `value`).
    - Tagged equality: String("1") != Int64(1) and Int64(1) != UInt64(1).
    - Hashable, so values may live in sets or serve as mapping keys.
    - Closed: only the four variants in this module may subclass it.
    """
    __slots__ = ("_value",)
    __variants__ = ()

    def __init_subclass__(cls, **options):
        if cls.__module__ != __name__:
            raise TypeError(f"type {OptionValue.__name__!r} is not an acceptable base type")
        super().__init_subclass__(**options)
        OptionValue.__variants__ += (cls,)

    def __new__(cls, value, /):
        if cls is OptionValue:
            raise TypeError("option-value cannot be instantiated directly, use one of its variants")
        self = super().__new__(cls)
        object.__setattr__(self, "_value", cls._sanitize(value))
        return self

    @classmethod
    def _sanitize(cls, value):
        return value

    @property
    def value(self):
        """
        The carried payload (str, int or bool depending on the variant).
        """
        return self._value

    def __setattr__(self, name, value, /):
        raise AttributeError(f"{type(self).__name__.lower()} is immutable")

    def __eq__(self, other, /):
        if not isinstance(other, OptionValue):
            return NotImplemented
        return type(self) is type(other) and self._value == other._value

    def __hash__(self):
        return hash((type(self).__name__, self._value))

    def __repr__(self):
        return f"{type(self).__name__}({self._value!r})"

    def __rich_repr__(self):
        yield self._value

    def __reduce__(self):
        return type(self), (self._value,)


class String(OptionValue):
    __slots__ = ()

    @classmethod
    def _sanitize(cls, value):
        if not isinstance(value, str):
            raise TypeError("string 'value' must be a string")
        return value


class Int64(OptionValue):
    __slots__ = ()

    @classmethod
    def _sanitize(cls, value):
        if not isinstance(value, int) or isinstance(value, bool):
            raise TypeError("int64 'value' must be an integer")
        if not INT64_MIN <= value <= INT64_MAX:
            raise ValueError("int64 'value' must fit in a signed 64-bit integer")
        return value


class UInt64(OptionValue):
    __slots__ = ()

    @classmethod
    def _sanitize(cls, value):
        if not isinstance(value, int) or isinstance(value, bool):
            raise TypeError("uint64 'value' must be an integer")
        if not 0 <= value <= UINT64_MAX:
            raise ValueError("uint64 'value' must fit in an unsigned 64-bit integer")
        return value


class Bool(OptionValue):
    __slots__ = ()

    @classmethod
    def _sanitize(cls, value):
        if not isinstance(value, bool):
            raise TypeError("bool 'value' must be a boolean")
        return value


def _integer(token, pattern, low, high, /):
    """Internal: the integer spelled by `token` when it matches `pattern` and lies in [low, high], else Unset."""
    if not re.fullmatch(pattern, token):
        return Unset
    sign, digits = token[0] if token[0] in "+-" else "", token.lstrip("+-").lstrip("0") or "0"
    # past 20 significant digits nothing fits in 64 bits, and int() may refuse the string
    if len(digits) > 20:
        return Unset
    number = int(sign + digits)
    return number if low <= number <= high else Unset


def _convert(token, default, /):
    """
    Internal: convert `token` following the variant of `default`.

    Returns
    - the converted OptionValue, or Unset when the token is absent (None)
      or does not follow the variant's grammar. Callers decide the fallback.
    """
    if token is None:
        return Unset
    match default:
        case Int64():
            if (number := _integer(token, r"[+-]?[0-9]+", INT64_MIN, INT64_MAX)) is not Unset:
                return Int64(number)
        case UInt64():
            if (number := _integer(token, r"\+?[0-9]+", 0, UINT64_MAX)) is not Unset:
                return UInt64(number)
        case String():
            return String(token)
        case Bool():
            if token in ("true", "false"):
                return Bool(token == "true")
    return Unset


def _fallback(default, /):
    """
    Internal: the value used when conversion fails.

    A boolean flag that is present on the command line is evidence of intent
    to enable it, so Bool falls back to True regardless of its declared default.
    """
    if isinstance(default, Bool):
        return Bool(True)
    return default


def coerce(token, default, /):
    """
    Convert a raw value token into an OptionValue of the same variant as `default`.

    Parameters
    - token: str | None
      The token following the flag, or None when the flag was the last argument.
    - default: OptionValue
      The descriptor's declared default; its variant selects the grammar.

    Returns
    - the converted value when `token` follows the grammar;
    - otherwise Bool(True) for Bool defaults and `default` itself for the others.

    Notes
    - Never raises for bad input text; only a non-OptionValue default is a TypeError.
    """
    if not isinstance(default, OptionValue):
        raise TypeError("coerce() default must be an option-value")
    if token is not None and not isinstance(token, str):
        raise TypeError("coerce() token must be a string or None")
    return coalesce(_convert(token, default), _fallback(default))


class OptionDescriptor:
    """
    Immutable description of one flag a command accepts.

    Parameters
    - short: str
      Short name without its dash (e.g. "a" for "-a").
    - long: str
      Long name without its dashes (e.g. "all" for "--all").
    - default: OptionValue
      Declared default; its variant is the coercion type.
    - description: str
      One line shown in the help listing.

    Identity
    - Two descriptors are equal when their (short, long) pair is equal.
      The default and description are associated data and take no part in
      equality or hashing, so a parsed mapping is keyed by flag identity.

    Raises
    - TypeError when a field has the wrong type.
    - ValueError when a name is empty, contains whitespace, or starts with a dash.
    """
    __slots__ = ("_short", "_long", "_default", "_description")

    def __init__(self, short, long, default, description=""):
        for field, name in (("short", short), ("long", long)):
            if not isinstance(name, str):
                raise TypeError(f"option-descriptor {field!r} must be a string")
            if not re.fullmatch(r"[^\s-]\S*", name):
                raise ValueError(f"option-descriptor {field!r} must be a non-empty name without leading dash")
        if not isinstance(default, OptionValue):
            raise TypeError("option-descriptor 'default' must be an option-value")
        if not isinstance(description, str):
            raise TypeError("option-descriptor 'description' must be a string")
        object.__setattr__(self, "_short", short)
        object.__setattr__(self, "_long", long)
        object.__setattr__(self, "_default", default)
        object.__setattr__(self, "_description", description)

    short = property(lambda self: self._short, doc="short name, without dash")
    long = property(lambda self: self._long, doc="long name, without dashes")
    default = property(lambda self: self._default, doc="declared default value")
    description = property(lambda self: self._description, doc="help text")

    @property
    def flags(self):
        """
        The two spellings recognized on the command line, e.g. ("-a", "--all").
        """
        return f"-{self._short}", f"--{self._long}"

    def matches(self, token, /):
        """
        Whether `token` is exactly one of this descriptor's spellings.
        """
        return token in self.flags

    def __setattr__(self, name, value, /):
        raise AttributeError("option-descriptor is immutable")

    def __eq__(self, other, /):
        if not isinstance(other, OptionDescriptor):
            return NotImplemented
        return (self._short, self._long) == (other._short, other._long)

    def __hash__(self):
        return hash((self._short, self._long))

    def __repr__(self):
        return "option-descriptor(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())

    def __rich_repr__(self):
        yield "short", self._short
        yield "long", self._long
        yield "default", self._default
        yield "description", self._description

    def __reduce__(self):
        return type(self), (self._short, self._long, self._default, self._description)


def find_option(options, flag, /):
    """
    Look up a parsed value by flag spelling.

    Parameters
    - options: Mapping[OptionDescriptor, OptionValue]
      The mapping a command receives in run().
    - flag: str
      Spelling with its dashes, e.g. "--all" or "-a".

    Returns
    - the stored value of the first entry whose descriptor spells `flag`,
      or None when no entry does.
    """
    for descriptor, value in options.items():
        if descriptor.matches(flag):
            return value
    return None


__all__ = (
    "OptionValue",
    "String",
    "Int64",
    "UInt64",
    "Bool",
    "OptionDescriptor",
    "coerce",
    "find_option",
)
