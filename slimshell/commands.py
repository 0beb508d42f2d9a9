"""
Slimshell command layer: register verbs, build commands, and run the loop.

What this module provides
- Shell: owns the registry, the terminal and the console; exposes on(verb) to
  start defining a command and run() to start the interactive loop.
- CommandSpec: the registered definition of one verb(+noun) bound to a handler
  and its required arguments.
- Registry: verb → ordered list of CommandSpec; first match wins on lookup.
- Response: what handlers return (success flag + messages to print).
- Builder stages: Naming → Calling → Requiring → Running, each exposing only
  the operations legal at that point of the chain.

Quick start
    from slimshell import Shell, ArgumentSpec, Response

    def greet(arguments):
        return Response(True, (f"hello {arguments['name']}",))

    Shell(title="demo").on("greet").call(greet).requiring([
        ArgumentSpec("name", "who should be greeted", ("n",)),
    ]).run()

Design notes
- Every stage of one chain holds the same CommandSpec object; each call
  mutates that record in place and hands back the next stage.
- Exit commands are registered before anything else, so a user command with
  the same verb and no noun can never be reached (first registration wins).
- A handler raising is fatal: the loop stops with a one-line notice, or the
  HandlerError propagates when the shell runs with shell=False.
"""
import asyncio
import collections
import functools
import inspect
import operator
from collections import defaultdict
from collections.abc import Iterable, Mapping
from enum import Enum

from rich.console import Console
from rich.text import Text

from .arguments import ArgumentSpec, Arguments, split
from .faults import *
from .resolver import Resolver
from .terminal import Terminal
from .utils import *
from .utils import sanitize_word

DEFAULT_TITLE = "Slimshell"
DEFAULT_VERSION = "1.0.0"
DEFAULT_EXITS = ("exit",)


class State(Enum):
    RUNNING = "running"
    STOPPED = "stopped"


class Response(collections.namedtuple("Response", ("success", "messages"), defaults=((),))):
    """
    Result of a handler: a success flag and the messages to print.

    success=False stops the loop (it is a termination signal, not an error).
    """
    __slots__ = ()

    def __new__(cls, success, messages=()):
        if not isinstance(success, bool):
            raise TypeError("response 'success' must be a boolean")
        if isinstance(messages, str) or not isinstance(messages, Iterable):
            raise TypeError("response 'messages' must be an iterable of strings")
        messages = tuple(messages)
        if not all(isinstance(message, str) for message in messages):
            raise TypeError("response 'messages' must be an iterable of strings")
        return super().__new__(cls, success, messages)

    @classmethod
    def coerce(cls, result, /):
        """
        Normalize whatever a handler returned into a Response.

        Accepted
        - Response → as-is
        - None → success without messages
        - bool → success flag without messages
        - Mapping with 'success' (and optionally 'messages') keys

        Raises
        - TypeError for anything else.
        """
        if isinstance(result, cls):
            return result
        if result is None:
            return cls(True)
        if isinstance(result, bool):
            return cls(result)
        if isinstance(result, Mapping):
            try:
                return cls(result["success"], result.get("messages") or ())
            except KeyError:
                raise TypeError("handler response mapping must have a 'success' key") from None
        raise TypeError(f"handler returned {type(result).__name__!r}, expected a response")


def noop(arguments=None, /):
    return Response(True)


def bye(arguments=None, /):
    return Response(False, ("byeee",))


_sanitize_word = functools.partial(sanitize_word, "command-spec")


class CommandSpec:
    """
    Registered definition of one verb(+noun) → handler binding.

    A single mutable record: the builder stages share it by reference and set
    `noun`, `handler` and `arguments` on it in place.
    """
    __slots__ = ("verb", "noun", "handler", "arguments")

    def __init__(self, verb, noun=None, handler=noop, arguments=()):
        self.verb = verb
        self.noun = noun
        self.handler = handler
        self.arguments = tuple(arguments)

    def __rich_repr__(self):
        yield "verb", self.verb
        yield "noun", self.noun
        yield "handler", getattr(self.handler, "__qualname__", self.handler)
        yield "arguments", self.arguments

    def __repr__(self):
        return "command-spec(%s)" % ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))


class Registry:
    """
    Mapping from verb to the ordered CommandSpecs sharing it.

    Lookup returns the first spec (in registration order) whose noun equals the
    requested one; duplicates registered later are silently unreachable.
    """

    def __init__(self):
        self._specs = defaultdict(list)

    def add(self, spec, /):
        if not isinstance(spec, CommandSpec):
            raise TypeError("registry add() argument must be a command-spec")
        self._specs[spec.verb].append(spec)
        return spec

    def lookup(self, verb, noun=None, /):
        for spec in self._specs.get(verb, ()):
            if spec.noun == noun:
                return spec
        return None

    @property
    def verbs(self):
        return tuple(self._specs)

    def __getitem__(self, verb):
        if verb not in self._specs:
            raise KeyError(verb)
        return tuple(self._specs[verb])

    def __contains__(self, verb):
        return verb in self._specs

    def __iter__(self):
        for specs in self._specs.values():
            yield from specs

    def __len__(self):
        return sum(map(len, self._specs.values()))

    def __repr__(self):
        return f"registry({list(self)!r})"


class _Stage:
    """
    Base of the builder stages: holds the owning shell and the shared spec.
    """
    __slots__ = ("_shell", "_spec")

    def __init__(self, shell, spec, /):
        self._shell = shell
        self._spec = spec

    @property
    def spec(self):
        return self._spec

    def __repr__(self):
        return f"{type(self).__name__.lower()}({self._spec!r})"


class Running(_Stage):
    """Final stage: only run() is left."""
    __slots__ = ()

    def run(self):
        return self._shell.run()


class Requiring(Running):
    """Handler attached: declare required arguments or run."""
    __slots__ = ()

    def requiring(self, arguments, /):
        if isinstance(arguments, (str, ArgumentSpec)) or not isinstance(arguments, Iterable):
            raise TypeError("requiring() argument must be an iterable of argument-specs")
        arguments = tuple(arguments)
        if not all(isinstance(argument, ArgumentSpec) for argument in arguments):
            raise TypeError("requiring() argument must be an iterable of argument-specs")
        self._spec.arguments = arguments
        return Running(self._shell, self._spec)


class Calling(_Stage):
    """Attach the handler."""
    __slots__ = ()

    def call(self, handler, /):
        if not callable(handler):
            raise TypeError("call() argument must be callable")
        self._spec.handler = handler
        return Requiring(self._shell, self._spec)


class Naming(Calling):
    """Freshly created command: set a noun or attach the handler."""
    __slots__ = ()

    def with_(self, noun, /):
        self._spec.noun = _sanitize_word("noun", noun)
        return Calling(self._shell, self._spec)


async def _settle(awaitable):
    return await awaitable


class Shell:
    """
    Interactive line-oriented command shell.

    Parameters
    - title: str (default "Slimshell")
    - version: str (default "1.0.0")
    - exits: Iterable[str]
      extra exit verbs; "exit" is always part of the set.
    - shell: bool (default True)
      print fatal faults and stop the loop; when False they are raised.
    - colorful: bool (default True)
    - console: rich Console used for every output line.
    - terminal: input channel providing readline(), ask() and reset().

    Lifecycle
    - Exit commands are registered on construction.
    - on(verb) starts a builder chain; run() reads, dispatches and prints until
      a handler answers success=False (or the input ends).
    """

    def __init__(
            self,
            title=Unset,
            version=Unset,
            exits=Unset,
            *,
            shell=True,
            colorful=True,
            console=Unset,
            terminal=Unset,
    ):
        for label, value in (("title", title), ("version", version)):
            if not isinstance(value, str | Unset):
                raise TypeError(f"shell {label!r} must be a string")
            elif isinstance(value, str) and not value.strip():
                raise ValueError(f"shell {label!r} cannot be empty")

        exits = coalesce(exits, ())
        if isinstance(exits, str) or not isinstance(exits, Iterable):
            raise TypeError("shell 'exits' must be an iterable of strings")

        self._title = coalesce(title, DEFAULT_TITLE).strip()
        self._version = coalesce(version, DEFAULT_VERSION).strip()
        self._exits = tuple(dict.fromkeys(
            _sanitize_word("exit verb", verb) for verb in (*exits, *DEFAULT_EXITS)
        ))
        self._shell = bool(shell)
        self._colorful = bool(colorful)
        self._console = coalesce(console, Console())
        self._terminal = Terminal(colorful=self._colorful) if terminal is Unset else terminal
        self._resolver = Resolver(self._terminal)
        self._registry = Registry()
        self._state = State.STOPPED
        self._fault = None

        for verb in self._exits:
            self._registry.add(CommandSpec(verb, handler=bye))

    @property
    def title(self):
        return self._title

    @property
    def version(self):
        return self._version

    @property
    def exits(self):
        return self._exits

    @property
    def shell(self):
        return self._shell

    @property
    def colorful(self):
        return self._colorful

    @property
    def console(self):
        return self._console

    @property
    def terminal(self):
        return self._terminal

    @property
    def registry(self):
        return self._registry

    @property
    def state(self):
        return self._state

    def __rich_repr__(self):
        yield "title", self._title
        yield "version", self._version
        yield "exits", self._exits
        yield "shell", self._shell
        yield "colorful", self._colorful

    def __repr__(self):
        return "shell(%s)" % ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))

    def on(self, verb, /):
        """
        Start defining a command for `verb`.

        The new CommandSpec (no noun, no-op handler) is registered right away;
        the returned stage offers with_() and call().
        """
        spec = self._registry.add(CommandSpec(_sanitize_word("verb", verb)))
        return Naming(self, spec)

    def trigger(self, fault, /):
        trigger(
            fault,
            console=self._console,
            colorful=self._colorful,
            shell=self._shell,
            title=self._title,
        )

    def _style(self, name, /):
        if not self._colorful:
            return ""
        styles = {"message": "cyan"} | getattr(__import__("__main__"), "__styles__", {})
        return styles.get(name, "")

    def _invoke(self, spec, arguments, /):
        result = spec.handler(arguments)
        if inspect.isawaitable(result):
            result = asyncio.run(_settle(result))
        return Response.coerce(result)

    def dispatch(self, line, /):
        """
        Process one command line.

        Steps
        - split the trimmed line into verb, noun and flags, and look the command up;
        - resolve its required arguments (prompting when needed);
        - call the handler and print its messages.

        Returns
        - True while the loop should keep running, False once it should stop.
          A False answer also leaves the shell in State.STOPPED.

        Raises
        - HandlerError: the handler failed and the shell runs with shell=False.
        - EOFError: the input ended while an argument was being asked for;
          run() treats it as the end of the session.
        """
        if not isinstance(line, str):
            raise TypeError("dispatch() argument must be a string")

        self._fault = None
        verb, cardinals, flags = split(line.strip())
        spec = self._registry.lookup(verb, cardinals[0] if cardinals else None)

        if spec is None:
            self.trigger(UnmatchedCommandError())
            return True

        try:
            arguments = self._resolver.resolve(Arguments(flags, cardinals=cardinals), spec.arguments)
        except CancelledResolutionError as fault:
            self.trigger(fault)
            return True

        try:
            response = self._invoke(spec, arguments)
        except Exception as exception:
            self._state = State.STOPPED
            detail = str(exception).strip().splitlines()
            self._fault = HandlerError("command %r failed (%s)" % (
                verb, ": ".join([type(exception).__name__, *detail[:1]])
            ))
            self._fault.__cause__ = exception
            self.trigger(self._fault)
            return False

        for message in response.messages:
            self._console.print(Text("  " + message, self._style("message")))

        if not response.success:
            self._state = State.STOPPED
        return response.success

    def run(self):
        """
        Run the interactive loop until a handler answers success=False.

        Ctrl-C at the command prompt drops the current line; the end of the
        input stops the loop.

        Returns
        - True when the loop stopped normally, False when a handler failed.
        """
        self._state = State.RUNNING
        self._fault = None

        try:
            while True:
                try:
                    line = self._terminal.readline()
                except KeyboardInterrupt:
                    continue
                # the input can also end while an argument is being asked for
                if not self.dispatch(line):
                    break
        except EOFError:
            pass
        finally:
            self._state = State.STOPPED

        return self._fault is None


__all__ = (
    "State",
    "Response",
    "CommandSpec",
    "Registry",
    "Naming",
    "Calling",
    "Requiring",
    "Running",
    "Shell",
    "noop",
    "bye",
)
