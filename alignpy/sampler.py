import numpy as np

from .errors import InvalidArgumentError


class FractionalSampler:
    """
    Makes reproducible keep or discard decisions that keep a given fraction of the candidates.
    Each call to keep() consumes exactly one draw of the random stream, so callers must only ask about records that
    are actually candidates for keeping or the retained set will differ between runs with the same seed.
    """
    __slots__ = 'fraction', 'seed', 'draws', '_generator'

    def __init__(self, fraction: float, seed: int = 0):
        """
        Constructor.
        :param fraction: Probability of keeping a candidate, within [0, 1].
        :param seed: Seed of the random stream.
        """
        if not 0.0 <= fraction <= 1.0:
            raise InvalidArgumentError("Sampling fraction must be within [0, 1], got {}".format(fraction))
        self.fraction = fraction
        self.seed = seed
        self.draws = 0
        self._generator = np.random.default_rng(seed)

    def keep(self) -> bool:
        """
        Draw once from the random stream.
        :return: True if the candidate should be kept.
        """
        self.draws += 1
        return self._generator.random() < self.fraction
