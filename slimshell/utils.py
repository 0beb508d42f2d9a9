"""
Slimshell utilities (internal helpers, carefully exposed)

Scope
- Small building blocks shared by the arguments/commands/terminal layers.

Overview
- UnsetType / Unset
  • Singleton sentinel to represent “value not provided” without conflating with None.
  • Falsey (bool(Unset) is False), printable as "Unset", and non-subclassable.

- coalesce(value, default=None)
  • Replace Unset with a concrete default, but preserve legitimate falsey values like None/0/"".

- sanitize_word(owner, label, value)
  • Shared validation for single-word names (verbs, nouns, argument names).

Quick examples
    >>> coalesce(Unset, "fallback")
    'fallback'
    >>> coalesce(None, "fallback") is None
    True
"""
import functools
import re
from typing import final


@final
class UnsetType:
    """
    Internal sentinel type representing a value that was not provided.

    Characteristics
    - Boolean-false: bool(Unset) is False, but it is distinct from None and 0.
    - Printable: repr(Unset) -> "Unset" for friendly diagnostics.
    - Non-subclassable: this type is sealed; do not subclass.
    - Singleton per process: UnsetType() always yields the same instance.
    """

    def __or__(self, other, /):
        """
        Support PEP 604 unions in isinstance checks (e.g., str | Unset).
        """
        try:
            return type(self) | other
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


Unset = UnsetType()


def coalesce(object, default=None, /):
    """
    Resolve the Unset sentinel to a concrete default.

    Returns the given object unless it is Unset, in which case `default` is
    returned. Falsey values like None, 0 or "" are preserved as-is.
    """
    return object if object is not Unset else default


def sanitize_word(owner, label, value, /):
    """
    Validate a single-word name (non-empty, no whitespace) and return it trimmed.

    `owner` and `label` only shape the error message, e.g.
    "command-spec verb cannot be empty".
    """
    if not isinstance(value, str):
        raise TypeError(f"{owner} {label} must be a string")
    elif not (value := value.strip()):
        raise ValueError(f"{owner} {label} cannot be empty")
    elif re.search(r"\s", value):
        raise ValueError(f"{owner} {label} cannot contain whitespace")
    return value


__all__ = (
    "UnsetType",
    "Unset",
    "coalesce",
)
