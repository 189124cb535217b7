"""
Markov Chain Text Generator

This module implements the Markov chain engine: a graph of word groups
("wordings") connected by counted transitions, trained line by line from raw
text and walked at random to generate new text.

Classes:
    - Wording: Immutable group of consecutive words, used as a graph node.
    - Transition: Number of times a wording was seen following another one.
    - State: Every transition leaving a given wording.
    - LearningParameters: How lines are cut into wordings while training.
    - ChainParameters: How chains are generated.
    - MarkovChainGenerator: The graph itself, with `train` and `generate`.

Example:
    >>> generator = MarkovChainGenerator()
    >>> generator.train(LearningParameters(wording_size=1), "a b c a b d")
    5
    >>> text = generator.generate(ChainParameters(max_state_traversal=3))
"""

import itertools
import logging
import random

from impersonate.models.errors import InsufficientStates


class Wording(tuple):
    """
    The smallest amount of wording used to represent a Markov state.

    A wording is a tuple of words, so it is immutable, hashable and ordered by
    content. Its display form is the words joined by single spaces.
    """

    def __new__(cls, words=()):
        return super().__new__(cls, words)

    @classmethod
    def from_text(cls, text):
        """Build a wording from its display form."""
        return cls(text.split(" "))

    @classmethod
    def coerce(cls, value):
        """Return `value` as a wording, parsing it if it is a string."""
        if isinstance(value, str):
            return cls.from_text(value)
        return cls(value)

    def __str__(self):
        return " ".join(self)

    def __repr__(self):
        return f"Wording({tuple(self)!r})"


class Transition:
    """
    Number of occurrences of a wording found right after another wording.

    In `"foo bar zoo" "quux meh"`, `"quux meh"` appears once after
    `"foo bar zoo"`. A transition is an arc of the Markov graph.
    """

    def __init__(self, count=0):
        self.count = count

    def increment(self):
        self.count += 1

    def __eq__(self, other):
        if not isinstance(other, Transition):
            return NotImplemented
        return self.count == other.count

    def __lt__(self, other):
        if not isinstance(other, Transition):
            return NotImplemented
        return self.count < other.count

    def __repr__(self):
        return f"Transition(count={self.count})"


class State:
    """A set of Markov transitions leaving a single wording."""

    def __init__(self):
        self.nexts = {}

    def record(self, successor):
        """
        Record one more occurrence of `successor` following this state.

        Args:
            successor (Wording): The wording observed next

        Returns:
            Transition: The updated transition
        """
        transition = self.nexts.setdefault(successor, Transition())
        transition.increment()
        return transition

    def successors(self):
        """Return the (wording, transition) pairs sorted by wording."""
        return sorted(self.nexts.items(), key=lambda item: item[0])

    def total_count(self):
        return sum(transition.count for transition in self.nexts.values())

    def __len__(self):
        return len(self.nexts)

    def __repr__(self):
        return f"State({self.nexts!r})"


class LearningParameters:
    """
    Learning parameters.

    Args:
        wording_size (int): Size (in words) of the wordings to learn. The
            minimum is 1, which generates sentences making very little sense.
            Higher values make more sense but leave the Markov states poor.

    Raises:
        ValueError: If `wording_size` is lower than 1
    """

    def __init__(self, wording_size=2):
        if wording_size < 1:
            raise ValueError(
                f"Wording size must be at least 1, got {wording_size}")
        self.wording_size = wording_size

    def __repr__(self):
        return f"LearningParameters(wording_size={self.wording_size})"


class ChainParameters:
    """
    Chain generation parameters.

    Args:
        max_state_traversal (int, optional): Maximum number of states to go
            through after the initial one. Unbounded when None.
        weighted (bool): Pick successors proportionally to their transition
            counts instead of uniformly.

    Raises:
        ValueError: If `max_state_traversal` is negative
    """

    def __init__(self, max_state_traversal=None, weighted=False):
        if max_state_traversal is not None and max_state_traversal < 0:
            raise ValueError(
                f"Maximum state traversal cannot be negative, got {max_state_traversal}")
        self.max_state_traversal = max_state_traversal
        self.weighted = weighted

    def __repr__(self):
        return (f"ChainParameters(max_state_traversal={self.max_state_traversal}, "
                f"weighted={self.weighted})")


class MarkovChainGenerator:
    """
    A set of Markov states built from text lines.

    The graph maps every wording that was followed by something to its
    `State`. Wordings that only ever ended a line appear as successors but
    never as keys.
    """

    def __init__(self, logger=None):
        """
        Create a new empty Markov chain generator.

        Args:
            logger (Logger, optional): Logger for training and generation
                events. Defaults to this module's logger.
        """
        self.states = {}
        self.logger = logger or logging.getLogger(__name__)

    @staticmethod
    def chunk_line(learn_params, line):
        """
        Split a line into wordings.

        Words are separated by single spaces, so consecutive spaces produce
        empty words. A blank line produces no wording at all.

        Args:
            learn_params (LearningParameters): How to cut the line
            line (str): The line to cut

        Returns:
            list: Wordings of `wording_size` words, the last one possibly shorter
        """
        if not line.strip():
            return []

        words = line.split(" ")
        size = learn_params.wording_size
        return [Wording(words[i:i + size]) for i in range(0, len(words), size)]

    def train(self, learn_params, line):
        """
        Cut a line into wordings and train the generator on it.

        Args:
            learn_params (LearningParameters): How to cut the line
            line (str): The line to learn from

        Returns:
            int: Number of transitions recorded for this line
        """
        chunks = self.chunk_line(learn_params, line)

        recorded = 0
        for wording, successor in zip(chunks, chunks[1:]):
            state = self.states.get(wording)
            if state is None:
                state = self.states[wording] = State()
            state.record(successor)
            recorded += 1

        return recorded

    def train_lines(self, learn_params, lines):
        """
        Train the generator on every line of an iterable.

        Args:
            learn_params (LearningParameters): How to cut the lines
            lines (iterable): Lines to learn from

        Returns:
            int: Total number of transitions recorded
        """
        line_count = 0
        total = 0
        for line in lines:
            total += self.train(learn_params, line)
            line_count += 1

        self.logger.info("Training completed", extra={
            "metrics": {
                "lines": line_count,
                "transitions": total,
                "states": len(self.states),
                "wording_size": learn_params.wording_size,
            }
        })
        return total

    def transition_count(self, wording, successor):
        """Return how many times `successor` followed `wording` (0 if never)."""
        state = self.states.get(Wording.coerce(wording))
        if state is None:
            return 0
        transition = state.nexts.get(Wording.coerce(successor))
        return transition.count if transition is not None else 0

    def generate(self, chain_params, rng=None):
        """
        Generate a random chain.

        The walk starts from a state picked uniformly among the trained ones
        and follows random transitions until `max_state_traversal` hops were
        made or a wording without successors is reached.

        Args:
            chain_params (ChainParameters): How to generate the chain
            rng (optional): Source of randomness exposing `randrange(stop)`.
                Defaults to the process-wide `random` module.

        Returns:
            str: The generated text

        Raises:
            InsufficientStates: If the generator has no state to start from
        """
        rng = rng or random

        keys = sorted(self.states)
        if not keys:
            raise InsufficientStates(len(keys))

        key = keys[rng.randrange(len(keys))]
        self.logger.debug("Initial state selected", extra={
            "metrics": {"initial_state": str(key), "states": len(keys)}
        })

        output = [str(key)]

        if chain_params.max_state_traversal is None:
            steps = itertools.count()
        else:
            steps = range(chain_params.max_state_traversal)

        for _ in steps:
            state = self.states.get(key)
            if not state:
                break

            if chain_params.weighted:
                key = self._pick_weighted(state, rng)
            else:
                successors = state.successors()
                key = successors[rng.randrange(len(successors))][0]

            output.append(str(key))

        return " ".join(output)

    @staticmethod
    def _pick_weighted(state, rng):
        # walk cumulative counts until the drawn occurrence is covered
        target = rng.randrange(state.total_count())
        for wording, transition in state.successors():
            if target < transition.count:
                return wording
            target -= transition.count
        raise RuntimeError("Transition counts changed during selection")

    def __len__(self):
        return len(self.states)

    def __contains__(self, wording):
        return Wording.coerce(wording) in self.states
