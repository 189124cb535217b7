"""
Trainer capability.

A trainer adapts a text source (a chat log, a CSV dataset...) so that a
`MarkovChainGenerator` can learn from it without knowing the source format.
Trainers share no base class: anything exposing `source_train` qualifies.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class Trainer(Protocol):
    """A way to train a Markov chain generator from a source."""

    def source_train(self, generator, learn_params):
        """
        Adapt to the source and train the input generator.

        Args:
            generator (MarkovChainGenerator): The generator to train
            learn_params (LearningParameters): How lines are cut into wordings

        Raises:
            ChainError: If the source cannot produce any usable content
        """
        ...
