"""
errors.py

Exceptions raised by the solver. Everything derives from ValueError so callers
that already guard input with `except ValueError` keep working.
"""


class SolverError(ValueError):
    """Base class for solver errors."""


class InvalidMask(SolverError):
    """User-entered feedback has the wrong length or unknown symbols."""


class EmptyCandidateSet(SolverError):
    """A search or build was asked to work on zero candidate words."""


class EmptyAttackPool(SolverError):
    """No words are available to be proposed as a guess."""


class NoCandidatesLeft(SolverError):
    """
    Feedback led nowhere: no word is consistent with it.

    Almost always means one of the earlier masks was entered incorrectly.
    """


class InvalidTreeFormat(SolverError):
    """A decision tree failed structural validation and must not be used."""


class WordLengthMismatch(SolverError):
    """Words of different lengths were mixed."""


class AlphabetMismatch(SolverError):
    """Words from different alphabets were mixed, or a letter is unknown."""


class InvalidSessionState(SolverError):
    """A serialized game session could not be decoded."""


class InvalidDictionary(SolverError):
    """A dictionary file could not be parsed into one word per line."""
