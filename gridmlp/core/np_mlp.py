"""Single hidden-layer sigmoid perceptron."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Sequence, Tuple

import numpy as np

from ..errors import ShapeMismatch
from .activations import sigmoid
from .types import Array


@dataclass(eq=False)
class Network:
    """Fully connected ``input -> hidden -> output`` network.

    Every weight and bias of a freshly constructed network is an
    independent uniform draw from ``[-1, 1]``.  Pass ``seed`` (or an
    explicit ``rng``) for reproducible initialisation.
    """

    input_size: int
    hidden_size: int
    output_size: int
    seed: int | None = None
    rng: np.random.Generator | None = field(default=None, repr=False)
    weights_ih: Array = field(init=False, repr=False)
    biases_h: Array = field(init=False, repr=False)
    weights_ho: Array = field(init=False, repr=False)
    biases_o: Array = field(init=False, repr=False)

    def __post_init__(self) -> None:
        for name in ("input_size", "hidden_size", "output_size"):
            value = getattr(self, name)
            if int(value) != value or value < 1:
                raise ValueError(f"{name} must be a positive integer, got {value!r}")
            setattr(self, name, int(value))
        rng = self.rng if self.rng is not None else np.random.default_rng(self.seed)
        self.weights_ih = rng.uniform(-1.0, 1.0, size=(self.input_size, self.hidden_size))
        self.biases_h = rng.uniform(-1.0, 1.0, size=self.hidden_size)
        self.weights_ho = rng.uniform(-1.0, 1.0, size=(self.hidden_size, self.output_size))
        self.biases_o = rng.uniform(-1.0, 1.0, size=self.output_size)

    @classmethod
    def from_state(
        cls,
        weights_ih: Sequence[Sequence[float]] | Array,
        biases_h: Sequence[float] | Array,
        weights_ho: Sequence[Sequence[float]] | Array,
        biases_o: Sequence[float] | Array,
    ) -> "Network":
        """Build a network from explicit parameter arrays."""

        w_ih = np.array(weights_ih, dtype=np.float64)
        w_ho = np.array(weights_ho, dtype=np.float64)
        b_h = np.array(biases_h, dtype=np.float64)
        b_o = np.array(biases_o, dtype=np.float64)
        if w_ih.ndim != 2 or w_ho.ndim != 2 or b_h.ndim != 1 or b_o.ndim != 1:
            raise ShapeMismatch("Weights must be matrices and biases vectors")
        net = cls(
            input_size=w_ih.shape[0],
            hidden_size=w_ih.shape[1],
            output_size=w_ho.shape[1],
        )
        net.load_params({"W_ih": w_ih, "b_h": b_h, "W_ho": w_ho, "b_o": b_o})
        return net

    # ------------------------------------------------------------------
    # Inference

    def forward(self, inputs: Sequence[float] | Array) -> Array:
        """Return the ``output_size`` activations for one input vector."""

        x = np.asarray(inputs, dtype=np.float64)
        if x.ndim != 1 or x.shape[0] != self.input_size:
            raise ShapeMismatch(
                f"Input size ({x.size}) must match input_size ({self.input_size})"
            )
        _, output = self.forward_batch(x.reshape(1, -1))
        return output[0]

    predict = forward

    def forward_batch(self, inputs: Array) -> Tuple[Array, Array]:
        """Return ``(hidden, output)`` activations for an ``(n, input_size)`` matrix."""

        if inputs.ndim != 2 or inputs.shape[1] != self.input_size:
            raise ShapeMismatch(
                f"Batch of shape {inputs.shape} does not match input_size ({self.input_size})"
            )
        hidden = sigmoid(inputs @ self.weights_ih + self.biases_h)
        output = sigmoid(hidden @ self.weights_ho + self.biases_o)
        return hidden, output

    # ------------------------------------------------------------------
    # Parameter access

    def params(self) -> Dict[str, Array]:
        return {
            "W_ih": self.weights_ih,
            "b_h": self.biases_h,
            "W_ho": self.weights_ho,
            "b_o": self.biases_o,
        }

    def load_params(self, params: Dict[str, Array]) -> None:
        expected = {
            "W_ih": (self.input_size, self.hidden_size),
            "b_h": (self.hidden_size,),
            "W_ho": (self.hidden_size, self.output_size),
            "b_o": (self.output_size,),
        }
        for key, shape in expected.items():
            if key not in params:
                raise KeyError(f"Missing parameter {key}")
            value = np.array(params[key], dtype=np.float64)
            if value.shape != shape:
                raise ShapeMismatch(f"{key} has shape {value.shape}, expected {shape}")
        self.weights_ih = np.array(params["W_ih"], dtype=np.float64)
        self.biases_h = np.array(params["b_h"], dtype=np.float64)
        self.weights_ho = np.array(params["W_ho"], dtype=np.float64)
        self.biases_o = np.array(params["b_o"], dtype=np.float64)

    def apply(self, updates: Dict[str, Array], divisor: float = 1.0) -> None:
        """Add ``updates / divisor`` into the parameters in place."""

        self.weights_ih += updates["W_ih"] / divisor
        self.biases_h += updates["b_h"] / divisor
        self.weights_ho += updates["W_ho"] / divisor
        self.biases_o += updates["b_o"] / divisor

    def copy(self) -> "Network":
        return Network.from_state(self.weights_ih, self.biases_h, self.weights_ho, self.biases_o)

    def parameter_count(self) -> int:
        return int(sum(int(p.size) for p in self.params().values()))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Network):
            return NotImplemented
        if (self.input_size, self.hidden_size, self.output_size) != (
            other.input_size,
            other.hidden_size,
            other.output_size,
        ):
            return False
        mine, theirs = self.params(), other.params()
        return all(np.array_equal(mine[k], theirs[k], equal_nan=True) for k in mine)

    __hash__ = None  # type: ignore[assignment]


__all__ = ["Network"]
