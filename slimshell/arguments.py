r"""
Slimshell argument specifications, the argument bag and line tokenization.

Overview
- ArgumentSpec: one required input of a command (name, description, alternatives).
  Immutable once built; validated on construction.
- Arguments: the argument bag handed to handlers. A dict of name → value plus the
  positional tokens (cardinals) of the line.
- split(line): break a raw line into (verb, cardinals, flags).
- tokenize(tokens): flag tokenizer for everything after the verb.

Tokenization rules
- "--name=value"   → flags["name"] = value
- "--no-name"      → flags["name"] = False
- "--name value"   → flags["name"] = value (when value does not start with '-')
- "--name"         → flags["name"] = True
- "-abc"           → a, b and c set to True (the last letter may take the next token)
- "-n5"            → flags["n"] = 5
- "--"             → every following token is positional
- numeric values are converted to int/float, "true"/"false" to booleans, and
  repeated flags collect their values into a list. Positionals stay strings.

Quick example:
    >>> verb, cardinals, flags = split("greet bob --loud")
    >>> verb, cardinals, flags
    ('greet', ('bob',), {'loud': True})
"""
import functools
import re
from collections.abc import Iterable

from .utils import Unset, coalesce, sanitize_word

_NUMBER = re.compile(r"[-+]?(\d+(\.\d*)?|\.\d+)([eE][-+]?\d+)?")
_SHORT = re.compile(r"-(?P<letters>[^\W\d_]+)(?P<value>.*)")


_sanitize_name = functools.partial(sanitize_word, "argument-spec")


class ArgumentSpec:
    """
    One required input of a command.

    Fields
    - name: str
      key under which the resolved value is stored in the argument bag.
    - description: str
      label shown when the value has to be prompted for.
    - alternatives: tuple[str, ...]
      other flag names whose value may stand in for `name`, checked in order.

    Validation
    - name and every alternative must be non-empty strings without whitespace.
    - description must be a non-empty string (trimmed).
    - alternatives cannot repeat themselves nor repeat `name`.

    Instances are read-only after construction.
    """
    __slots__ = ("_name", "_description", "_alternatives")

    def __init__(self, name, description, alternatives=Unset, /):
        name = _sanitize_name("name", name)

        if not isinstance(description, str):
            raise TypeError("argument-spec description must be a string")
        elif not (description := description.strip()):
            raise ValueError("argument-spec description cannot be empty")

        alternatives = coalesce(alternatives, ())
        if isinstance(alternatives, str) or not isinstance(alternatives, Iterable):
            raise TypeError("argument-spec alternatives must be an iterable of strings")

        seen = [name]
        for alternative in alternatives:
            alternative = _sanitize_name("alternatives", alternative)
            if alternative in seen:
                raise ValueError(f"argument-spec alternatives cannot repeat {alternative!r}")
            seen.append(alternative)

        object.__setattr__(self, "_name", name)
        object.__setattr__(self, "_description", description)
        object.__setattr__(self, "_alternatives", tuple(seen[1:]))

    @property
    def name(self):
        return self._name

    @property
    def description(self):
        return self._description

    @property
    def alternatives(self):
        return self._alternatives

    def __setattr__(self, name, value, /):
        raise AttributeError("argument-spec is read-only")

    def __eq__(self, other):
        if not isinstance(other, ArgumentSpec):
            return NotImplemented
        return (self.name, self.description, self.alternatives) == (
            other.name, other.description, other.alternatives
        )

    def __hash__(self):
        return hash((self.name, self.description, self.alternatives))

    def __rich_repr__(self):
        yield "name", self.name
        yield "description", self.description
        yield "alternatives", self.alternatives

    def __repr__(self):
        return "argument-spec(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())


class Arguments(dict):
    """
    The argument bag: resolved name → value pairs handed to a handler.

    Values are scalars (str, int, float, bool) or lists of scalars. The
    positional tokens of the line are kept apart in `cardinals`; the first of
    them is the noun.
    """

    def __init__(self, *args, cardinals=(), **kwargs):
        super().__init__(*args, **kwargs)
        self._cardinals = tuple(cardinals)

    @property
    def cardinals(self):
        return self._cardinals

    @property
    def noun(self):
        return self._cardinals[0] if self._cardinals else None

    def provides(self, name, /):
        """
        Whether `name` holds a usable value (an empty string counts as missing).
        """
        return name in self and self[name] != ""

    def copy(self):
        return type(self)(self, cardinals=self._cardinals)

    def __repr__(self):
        return f"arguments({super().__repr__()}, cardinals={self._cardinals!r})"


def _convert(value, /):
    """
    Internal: turn a raw flag value into int/float/bool when it looks like one.
    """
    if value in ("true", "false"):
        return value == "true"
    if _NUMBER.fullmatch(value):
        try:
            return int(value)
        except ValueError:
            return float(value)
    return value


def _store(flags, name, value, /):
    """
    Internal: record a flag value; repeated flags collect into a list.
    """
    if name not in flags:
        flags[name] = value
    elif isinstance(flags[name], list):
        flags[name].append(value)
    else:
        flags[name] = [flags[name], value]


def _takes_value(token, /):
    return token is not None and (token == "-" or not token.startswith("-") or bool(_NUMBER.fullmatch(token)))


def tokenize(tokens, /):
    """
    Split tokens into positional cardinals and a flag mapping.

    Parameters
    - tokens: Iterable[str]
      the tokens following the verb (already whitespace-split).

    Returns
    - tuple[tuple[str, ...], dict[str, object]]: (cardinals, flags)

    Raises
    - TypeError: when an item is not a string.
    """
    tokens = list(tokens)
    if not all(isinstance(token, str) for token in tokens):
        raise TypeError("tokenize() argument must be an iterable of strings")

    cardinals = []
    flags = {}
    index = 0

    while index < len(tokens):
        token = tokens[index]
        following = tokens[index + 1] if index + 1 < len(tokens) else None
        index += 1

        if token == "--":
            cardinals.extend(tokens[index:])
            break

        if token.startswith("--") and len(token) > 2:
            name, equals, value = token[2:].partition("=")
            if equals:
                _store(flags, name, _convert(value))
            elif name.startswith("no-") and len(name) > 3:
                _store(flags, name[3:], False)
            elif _takes_value(following):
                _store(flags, name, _convert(following))
                index += 1
            else:
                _store(flags, name, True)
            continue

        if (match := _SHORT.fullmatch(token)) and not _NUMBER.fullmatch(token):
            letters = match["letters"]
            value = match["value"]
            for letter in letters[:-1]:
                _store(flags, letter, True)
            if value:
                _store(flags, letters[-1], _convert(value.removeprefix("=")))
            elif _takes_value(following):
                _store(flags, letters[-1], _convert(following))
                index += 1
            else:
                _store(flags, letters[-1], True)
            continue

        cardinals.append(token)

    return tuple(cardinals), flags


def split(line, /):
    """
    Break a raw command line into (verb, cardinals, flags).

    The line is trimmed and split on whitespace; the first token is the verb
    (an empty string for a blank line) and the rest goes through tokenize().
    """
    if not isinstance(line, str):
        raise TypeError("split() argument must be a string")
    atoms = line.split()
    if not atoms:
        return "", (), {}
    return atoms[0], *tokenize(atoms[1:])


__all__ = (
    "ArgumentSpec",
    "Arguments",
    "tokenize",
    "split",
)
