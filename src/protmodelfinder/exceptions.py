"""
Exception hierarchy for protmodelfinder.

Fatal conditions (``InvalidModelGroup``, ``NoCandidatesScored``,
``AlignmentFormatError``) abort a run. Per-candidate conditions
(``OracleError`` subclasses, ``DegenerateAICc``, ``UnscorableCandidate``)
only remove or annotate a single candidate.
"""

from typing import Optional


class ModelFinderError(Exception):
    """Base class for all protmodelfinder errors."""


class InvalidModelGroup(ModelFinderError, ValueError):
    """Model set tag is not one of the known groups."""

    def __init__(self, value, valid: Optional[list] = None):
        self.value = value
        self.valid = valid or []
        message = f"Unknown model set: '{value}'"
        if self.valid:
            message += f". Valid model sets are: {', '.join(self.valid)}"
        super().__init__(message)


class AlignmentFormatError(ModelFinderError, ValueError):
    """Input file is not a usable protein PHYLIP alignment."""


class DegenerateAICc(ModelFinderError, ArithmeticError):
    """AICc is undefined because n_sites - K - 1 <= 0."""

    def __init__(self, total_params: int, n_sites: int):
        self.total_params = total_params
        self.n_sites = n_sites
        super().__init__(
            f"AICc undefined for K={total_params} and n={n_sites} "
            f"(n - K - 1 = {n_sites - total_params - 1})"
        )


class OracleError(ModelFinderError, RuntimeError):
    """
    Failure of the external likelihood engine for one invocation.

    Attributes
    ----------
    model : str or None
        Candidate id the invocation was made for, if any
    """

    def __init__(self, message: str, model: Optional[str] = None):
        self.model = model
        if model:
            message = f"{model}: {message}"
        super().__init__(message)


class OracleUnavailable(OracleError):
    """The oracle executable could not be found or started."""


class OracleNoOutput(OracleError):
    """The oracle finished without writing its stats artifact."""


class OracleParseError(OracleError):
    """The stats artifact holds no parsable log-likelihood."""


class UnscorableCandidate(ModelFinderError, ValueError):
    """A scored candidate has a non-finite BIC and cannot be ranked."""

    def __init__(self, model: str, bic: float):
        self.model = model
        self.bic = bic
        super().__init__(f"{model}: non-finite BIC ({bic}); excluded from ranking")


class NoCandidatesScored(ModelFinderError, RuntimeError):
    """No candidate produced a rankable score."""
