"""Random number generator seeding."""

import numba as nb
import numpy as np

__all__ = ["seed"]


@nb.njit(cache=True)
def seed(seed: nb.int64) -> None:
    """Sets the numpy random seed for all Numba jitted functions.

    Note that setting the seed using `np.random.seed` outside a Numba jitted
    function does *not* set the seed of Numba functions.

    Parameters
    ----------
    seed : int
        Random number generator seed
    """
    np.random.seed(seed)
