"""
Slimshell terminal: the single input channel of a shell.

What this module provides
- Terminal: wraps a prompt_toolkit PromptSession and offers the two blocking
  reads the shell needs:
  • readline(prompt): one command line.
  • ask(description): one argument value, cancellable with Escape or Ctrl-C.
  • reset(): drop the session and start over with a clean one.

Cancellation
- While ask() is pending, the Enter key and the cancel keys race on the same
  prompt application; whichever arrives first decides the outcome. The cancel
  keys exit the application with CancelledResolutionError.
- The cancel bindings only exist for the duration of a single ask() and are
  removed on every exit path, so later prompts never inherit stale listeners.
"""
from contextlib import contextmanager

from prompt_toolkit import PromptSession
from prompt_toolkit.formatted_text import FormattedText
from prompt_toolkit.key_binding import KeyBindings, merge_key_bindings

from .faults import CancelledResolutionError
from .utils import Unset, coalesce


def _cancel(event):
    """Exit the pending prompt with a cancellation."""
    event.app.exit(exception=CancelledResolutionError(), style="class:aborting")


def cancel_bindings():
    """
    Key bindings that cancel a pending argument prompt.

    Escape is bound eagerly so it is not held back as a meta-key prefix.
    """
    bindings = KeyBindings()
    bindings.add("escape", eager=True)(_cancel)
    bindings.add("c-c")(_cancel)
    return bindings


class Terminal:
    """
    Blocking, line-oriented input channel backed by prompt_toolkit.

    Parameters
    - colorful: bool
      render argument prompts in yellow.
    - factory: Callable[[], PromptSession]
      builds the underlying session (PromptSession by default); handy to plug
      custom input/output objects.
    """

    def __init__(self, *, colorful=True, factory=Unset):
        self._colorful = bool(colorful)
        self._factory = coalesce(factory, PromptSession)
        if not callable(self._factory):
            raise TypeError("terminal 'factory' must be callable")
        self._session = None

    @property
    def session(self):
        if self._session is None:
            self._session = self._factory()
        return self._session

    @property
    def colorful(self):
        return self._colorful

    def readline(self, prompt="> "):
        """
        Read one command line.

        Raises
        - EOFError: the input reached its end (Ctrl-D).
        - KeyboardInterrupt: the line was aborted (Ctrl-C).
        """
        return self.session.prompt(prompt)

    def label(self, description, /):
        """Prompt text shown while asking for an argument."""
        text = f"  ${description}: "
        if not self._colorful:
            return text
        return FormattedText([("ansiyellow", text)])

    @contextmanager
    def listening(self):
        """
        Install the cancel bindings on the session for the duration of the block.

        The previous bindings are restored however the block exits.
        """
        session = self.session
        previous = session.key_bindings
        session.key_bindings = (
            cancel_bindings() if previous is None else merge_key_bindings([previous, cancel_bindings()])
        )
        try:
            yield session
        finally:
            session.key_bindings = previous

    def ask(self, description, /):
        """
        Ask for one argument value and return it trimmed.

        Raises
        - CancelledResolutionError: Escape or Ctrl-C was pressed first.
        - EOFError: the input reached its end.
        """
        with self.listening() as session:
            return session.prompt(self.label(description)).strip()

    def reset(self):
        """Forget the current session; the next read builds a fresh one."""
        self._session = None


__all__ = (
    "Terminal",
    "cancel_bindings",
)
