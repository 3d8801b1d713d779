"""Seeded random number source for collision sampling."""

import math
from typing import Optional

import torch


class RandomSource:
    """Scalar random draws from a seeded torch generator.

    Uniform numbers are drawn in batches on the CPU and served one at a
    time, so a given seed always reproduces the same sequence.

    Attributes:
        generator: Underlying torch.Generator
        batch_size: Number of uniform numbers drawn per batch
    """

    def __init__(self, seed: Optional[int] = None, batch_size: int = 4096):
        self.generator = torch.Generator(device='cpu')
        if seed is None:
            self.generator.seed()
        else:
            self.generator.manual_seed(seed)
        self.batch_size = batch_size
        self._buffer = torch.empty(0, dtype=torch.float64)
        self._position = 0

    def seed(self, seed: int) -> None:
        """Reset the generator to a given seed."""
        self.generator.manual_seed(seed)
        self._buffer = torch.empty(0, dtype=torch.float64)
        self._position = 0

    def uniform(self) -> float:
        """Uniform random number in [0, 1)."""
        if self._position >= self._buffer.shape[0]:
            self._buffer = torch.rand(self.batch_size, generator=self.generator,
                                      dtype=torch.float64)
            self._position = 0
        value = self._buffer[self._position].item()
        self._position += 1
        return value

    def uniform_pos(self) -> float:
        """Uniform random number in (0, 1)."""
        r = self.uniform()
        while r <= 0.:
            r = self.uniform()
        return r

    def gaussian(self) -> float:
        """Standard normal random number (Box-Muller)."""
        u1 = self.uniform_pos()
        u2 = self.uniform()
        return math.sqrt(-2. * math.log(u1)) * math.cos(2. * math.pi * u2)

    def lorentz(self, mu: float, gamma: float) -> float:
        """Cauchy-distributed number with location mu and half width gamma."""
        return mu + gamma * math.tan(math.pi * (self.uniform() - 0.5))

    def voigt(self, mu: float, sigma: float, gamma: float) -> float:
        """Voigt-distributed number.

        Args:
            mu: Location
            sigma: Standard deviation of the Gaussian component
            gamma: Half width of the Lorentzian component

        Returns:
            Sampled value
        """
        if gamma <= 0.:
            return mu + sigma * self.gaussian()
        if sigma <= 0.:
            return self.lorentz(mu, gamma)
        return self.lorentz(mu + sigma * self.gaussian(), gamma)
