"""Exceptions raised by Focusly collaborators.

The timer core never raises these: invalid transition requests are ignored
and collaborator failures are logged.  They surface only from the managers
that own user data.
"""


class FocuslyError(Exception):
    """Base class for Focusly errors."""


class PresetError(FocuslyError):
    """A preset operation was refused (built-in preset, unknown id)."""


class TaskImportError(FocuslyError):
    """A task import payload could not be decoded."""
