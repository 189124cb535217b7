"""
Chain generation errors.

Every error the Markov chain engine can report derives from `ChainError`, so
callers (and trainers) can catch the whole family with a single clause.
"""


class ChainError(Exception):
    """Base class for chain generation errors."""


class InsufficientStates(ChainError):
    """
    Raised when a chain is requested from a generator without any state to start from.

    Args:
        count (int): Number of predecessor states the generator held
    """

    def __init__(self, count):
        self.count = count
        super().__init__(
            f"Too few initial states to generate a chain: {count}")
