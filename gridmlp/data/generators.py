"""Built-in bit-pattern training sets."""

from __future__ import annotations

from ..core.types import TrainingSet
from ..training.metrics import int_to_bits
from .registry import register_dataset


@register_dataset("bit_count")
def make_bit_count(bits: int, output_size: int, **_: object) -> TrainingSet:
    """Every ``bits``-wide number mapped to its count of set bits.

    The count is written as a most-significant-first binary vector of
    ``output_size`` entries.
    """

    if bits < 1:
        raise ValueError("bits must be positive")
    if bits >= 1 << output_size:
        raise ValueError(f"output_size={output_size} cannot encode a count of {bits}")
    pairs = []
    for number in range(1 << bits):
        ones = bin(number).count("1")
        pairs.append((int_to_bits(number, bits), int_to_bits(ones, output_size)))
    return TrainingSet.from_pairs(pairs, input_size=bits, output_size=output_size)


@register_dataset("parity")
def make_parity(bits: int, output_size: int = 1, **_: object) -> TrainingSet:
    """Every ``bits``-wide number mapped to ``[number % 2]``."""

    if bits < 1:
        raise ValueError("bits must be positive")
    if output_size != 1:
        raise ValueError("parity targets have exactly one output")
    pairs = [(int_to_bits(n, bits), [float(n % 2)]) for n in range(1 << bits)]
    return TrainingSet.from_pairs(pairs, input_size=bits, output_size=1)


__all__ = ["make_bit_count", "make_parity"]
