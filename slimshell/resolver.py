"""
Slimshell argument resolution: fill every required argument before a handler runs.
"""
from collections.abc import Iterable

from .arguments import ArgumentSpec, Arguments
from .faults import CancelledResolutionError


class Resolver:
    """
    Fills the required arguments of a command from the argument bag or the terminal.

    For each ArgumentSpec whose name is missing from the bag:
    1. the value of the first alternative present in the bag is copied over;
    2. otherwise the terminal is asked (labelled with the description) until a
       non-empty value comes back.

    Cancelling a prompt aborts the whole resolution: the partially filled bag
    is dropped, the terminal is reset and CancelledResolutionError propagates.
    """

    def __init__(self, terminal, /):
        if not hasattr(terminal, "ask") or not callable(terminal.ask):
            raise TypeError("resolver terminal must provide an ask() method")
        self._terminal = terminal

    @property
    def terminal(self):
        return self._terminal

    def resolve(self, arguments, requirements=(), /):
        """
        Return a copy of `arguments` with every requirement filled.

        Parameters
        - arguments: Arguments
          the bag parsed from the command line (left untouched).
        - requirements: Iterable[ArgumentSpec]
          the required arguments, resolved in order.

        Raises
        - CancelledResolutionError: the user cancelled one of the prompts.
        """
        if not isinstance(arguments, Arguments):
            raise TypeError("resolve() first argument must be an arguments bag")
        if not isinstance(requirements, Iterable):
            raise TypeError("resolve() second argument must be an iterable of argument-specs")

        resolved = arguments.copy()

        for requirement in requirements:
            if not isinstance(requirement, ArgumentSpec):
                raise TypeError("resolve() requirements must be argument-specs")
            if resolved.provides(requirement.name):
                continue

            for alternative in requirement.alternatives:
                if resolved.provides(alternative):
                    resolved[requirement.name] = resolved[alternative]
                    break
            else:
                resolved[requirement.name] = self._prompt(requirement)

        return resolved

    def _prompt(self, requirement):
        value = ""
        while not value:
            try:
                value = self._terminal.ask(requirement.description)
            except CancelledResolutionError:
                self._terminal.reset()
                raise
            value = value.strip()
        return value


__all__ = (
    "Resolver",
)
