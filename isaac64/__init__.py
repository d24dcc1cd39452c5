from .oracle.RNG_isaac64 import (
    Isaac64RNG,
    Isaac64State,
    create,
    init,
    init_array,
    next_word,
    derive_seed,
)

__all__ = [
    "Isaac64RNG",
    "Isaac64State",
    "create",
    "init",
    "init_array",
    "next_word",
    "derive_seed",
]
