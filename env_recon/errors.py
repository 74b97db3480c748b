"""Exceptions raised while loading or stepping a recon domain.

All of them are fatal: a malformed domain or instance cannot be simulated,
so callers are expected to let them propagate.
"""


class ReconDomainError(ValueError):
    """Base class for domain, instance and evaluation errors."""


class UnknownTypeError(ReconDomainError):
    """An object type name was never registered."""


class UndeclaredVariableError(ReconDomainError):
    """A formula or instance refers to a variable that was never declared."""


class ArityMismatchError(ReconDomainError):
    """A ground variable has the wrong number or types of arguments."""


class IncompleteTransitionError(ReconDomainError):
    """A state-fluent has no transition, or a case has no default branch."""


class InvalidProbabilityError(ReconDomainError):
    """A Bernoulli parameter lies outside [0, 1]."""


class ActionConstraintError(ReconDomainError):
    """An action assignment violates a declared concurrency bound."""
