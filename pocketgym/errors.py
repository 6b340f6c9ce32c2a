"""
Exception hierarchy for pocketgym environments.

A validation failure is a defect in the caller: it is raised where it is
detected and never caught inside the package.
"""


class GymError(Exception):
    """Base class for all pocketgym errors."""


class InvalidActionError(GymError, ValueError):
    """Action has the wrong length or a component outside [-1, 1]."""


class InvalidCategoricalActionError(InvalidActionError):
    """Categorical action index is out of range."""


class UnsupportedCapabilityError(GymError, NotImplementedError):
    """The environment does not offer the requested capability."""


class InvalidSettingsError(GymError, ValueError):
    """A settings record violates a physical precondition."""
