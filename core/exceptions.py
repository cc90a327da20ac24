"""
Exceptions raised at the collaborator boundaries. The calculation itself degrades
per window and does not raise these.
"""


class DaglichtError(Exception):
    """Base class for daylight engine errors."""


class ModelQueryError(DaglichtError):
    """A building model (or a linked model) could not be read."""


class ParameterWriteError(DaglichtError):
    """A computed value could not be written back onto an element."""
