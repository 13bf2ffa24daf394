"""Configuration dataclass for package-wide defaults."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional

VALID_ADJUSTMENTS = [
    "none",
    "bonferroni",
    "sidak",
    "holm",
    "holm-sidak",
    "hochberg",
    "hommel",
    "bh",
    "by",
    "hommel-original",
]


@dataclass(frozen=True)
class StikpetConfig:
    """Package-wide defaults used when a function argument is left as None.

    Attributes:
        alpha: Significance level for critical-value based tests (default: 0.05)
        p_adjust: Multiple comparison adjustment for post-hoc tests (default: bonferroni)
        n_iter: Number of iterations for permutation tests (default: 1000)
        max_iter: Iteration cap for bisection searches (default: 500)
        seed: Optional seed for permutation tests (None = unseeded)
        exact_max_n: Largest sample size for full permutation distributions (default: 10)
    """

    alpha: float = 0.05
    p_adjust: str = "bonferroni"
    n_iter: int = 1000
    max_iter: int = 500
    seed: Optional[int] = None
    exact_max_n: int = 10

    def __post_init__(self):
        """Validate configuration."""
        if self.alpha <= 0 or self.alpha >= 1:
            raise ValueError(f"Alpha must be in (0, 1), got {self.alpha}")

        if self.p_adjust not in VALID_ADJUSTMENTS:
            raise ValueError(
                f"p_adjust must be one of {VALID_ADJUSTMENTS}, got {self.p_adjust}"
            )

        if self.n_iter < 1:
            raise ValueError(f"n_iter must be >= 1, got {self.n_iter}")

        if self.max_iter < 1:
            raise ValueError(f"max_iter must be >= 1, got {self.max_iter}")

        if self.exact_max_n < 2:
            raise ValueError(f"exact_max_n must be >= 2, got {self.exact_max_n}")


_active = StikpetConfig()


def get_config() -> StikpetConfig:
    """Return the active configuration."""
    return _active


def set_config(**changes) -> StikpetConfig:
    """Install a new active configuration with the given fields changed.

    Raises:
        ValueError: If a changed value fails validation
        TypeError: If an unknown field is given
    """
    global _active
    _active = replace(_active, **changes)
    return _active


def reset_config() -> StikpetConfig:
    """Restore the default configuration."""
    global _active
    _active = StikpetConfig()
    return _active
