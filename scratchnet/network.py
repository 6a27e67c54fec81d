"""Fully-connected feed-forward network trained by backpropagation.

For a network with layer sizes ``structure[0..L-1]``:

- ``weights[l]`` has shape ``(structure[l+1], structure[l])`` and maps the
  activations of layer ``l`` to the pre-activations of layer ``l+1``
- ``biases[l]`` has shape ``(structure[l+1], 1)`` and is added when producing
  layer ``l+1``
- ``activations[l]`` and ``z[l]`` are ``(structure[l], 1)`` columns cached by
  the most recent forward pass; ``z[0]`` is never written

Cost is the mean squared error over the output layer and every layer uses the
logistic nonlinearity.

Chain rule for one output neuron ``j`` fed by neuron ``k`` of the previous
layer::

    z_j   = sum_k(w_jk * a_k) + b_j
    a_j   = sigmoid(z_j)
    dC/da_j  = 2 * (a_j - y_j)
    dC/dz_j  = dC/da_j * sigmoid'(z_j)              (x_j)
    dC/dw_jk = x_j * a_k
    dC/db_j  = x_j
    dC/da_k  = sum_j(w_jk * x_j)                    (feeds x of layer below)
"""

import logging
import random
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from .activations import sigmoid, sigmoid_prime
from .dataset import Dataset
from .errors import ShapeMismatchError
from .matrix import Matrix
from .models import TrainingReport
from .sampling import SampleOrder, iter_sample_indices

logger = logging.getLogger("scratchnet.network")

DEFAULT_LEARNING_RATE = 0.01
DEFAULT_LOG_INTERVAL = 100

Vector = Union[Matrix, Sequence[float]]


class UpdateRule(Enum):
    """How a gradient is turned into a parameter step"""

    # param -= rate * grad, bias gradient is the layer error signal
    STANDARD = "standard"
    # param -= rate * (param ⊙ grad), bias gradient is error ⊙ bias
    MULTIPLICATIVE = "multiplicative"


@dataclass
class Gradients:
    """Result of one backward pass.

    ``errors[l]`` is dC/dz for layer ``l`` (``errors[0]`` is None);
    ``weights[l]`` and ``biases[l]`` line up with ``Network.weights[l]`` and
    ``Network.biases[l]``.
    """

    errors: list[Optional[Matrix]]
    weights: list[Matrix]
    biases: list[Matrix]


class Network:
    """Feed-forward sigmoid network over a fixed layer structure."""

    def __init__(
        self,
        structure: Sequence[int],
        learning_rate: float = DEFAULT_LEARNING_RATE,
        update_rule: Union[UpdateRule, str] = UpdateRule.STANDARD,
        rng: Optional[random.Random] = None,
    ):
        structure = [int(size) for size in structure]
        if len(structure) < 2:
            raise ValueError("A network needs at least an input and an output layer")
        if any(size < 1 for size in structure):
            raise ValueError(f"Layer sizes must be positive, got {structure}")
        if learning_rate <= 0:
            raise ValueError("learning_rate must be positive")

        self.structure = structure
        self.learning_rate = float(learning_rate)
        self.update_rule = UpdateRule(update_rule)

        self.weights = [
            Matrix(fan_out, fan_in, rng=rng) for fan_in, fan_out in zip(structure[:-1], structure[1:])
        ]
        self.biases = [Matrix(size, 1, 0.0) for size in structure[1:]]
        self.activations = [Matrix(size, 1, 0.0) for size in structure]
        self.z = [Matrix(size, 1, 0.0) for size in structure]

        logger.debug(
            "Created network %s (learning rate %s, %s updates)",
            structure,
            self.learning_rate,
            self.update_rule.value,
        )

    @property
    def layer_count(self) -> int:
        return len(self.structure)

    @property
    def output_size(self) -> int:
        return self.structure[-1]

    def _as_column(self, values: Vector, size: int, what: str) -> Matrix:
        if isinstance(values, Matrix):
            column = values.copy()
        else:
            values = list(values)
            if len(values) != size:
                raise ShapeMismatchError(what, (size, 1), (len(values), 1))
            column = Matrix.column(values)
        if column.shape() != (size, 1):
            raise ShapeMismatchError(what, (size, 1), column.shape())
        return column

    def forward_propagate(self, inputs: Vector) -> Matrix:
        """Run ``inputs`` through the network and return the output column."""
        self.activations[0] = self._as_column(inputs, self.structure[0], "use as input")

        for layer in range(1, self.layer_count):
            z = self.weights[layer - 1].multiply(self.activations[layer - 1]).add(self.biases[layer - 1])
            self.z[layer] = z
            activation = z.copy()
            activation.apply(sigmoid)
            self.activations[layer] = activation

        return self.activations[-1].copy()

    def forward_sample(self, dataset: Dataset, index: int) -> Matrix:
        """Forward-propagate sample ``index`` of ``dataset``."""
        image, _ = dataset[index]
        return self.forward_propagate(image)

    def cost(self, target: Vector) -> float:
        """Mean squared error of the current output against ``target``."""
        target = self._as_column(target, self.output_size, "compare output with")
        output = self.activations[-1]
        total = 0.0
        for i in range(self.output_size):
            difference = output.get(i, 0) - target.get(i, 0)
            total += difference * difference
        return total / self.output_size

    def compute_gradients(self, target: Vector) -> Gradients:
        """Backpropagate ``target`` through the cached forward pass."""
        target = self._as_column(target, self.output_size, "compare output with")
        last = self.layer_count - 1

        # sigmoid'(z) for every layer; layer 0 is a placeholder
        az = []
        for z in self.z:
            derivative = z.copy()
            derivative.apply(sigmoid_prime)
            az.append(derivative)

        errors: list[Optional[Matrix]] = [None] * self.layer_count
        output_error = self.activations[last].subtract(target)
        output_error.scalar_multiply(2.0)
        errors[last] = output_error.hadamard(az[last])

        for layer in range(last - 1, 0, -1):
            back = self.weights[layer].copy()
            back.transpose()
            errors[layer] = back.multiply(errors[layer + 1]).hadamard(az[layer])

        weight_gradients = []
        bias_gradients = []
        for layer in range(last):
            upstream = errors[layer + 1]
            activation_t = self.activations[layer].copy()
            activation_t.transpose()
            weight_gradients.append(upstream.multiply(activation_t))
            if self.update_rule is UpdateRule.MULTIPLICATIVE:
                bias_gradients.append(upstream.hadamard(self.biases[layer]))
            else:
                bias_gradients.append(upstream.copy())

        return Gradients(errors=errors, weights=weight_gradients, biases=bias_gradients)

    def _step(self, parameter: Matrix, gradient: Matrix) -> Matrix:
        if self.update_rule is UpdateRule.MULTIPLICATIVE:
            step = parameter.hadamard(gradient)
        else:
            step = gradient.copy()
        step.scalar_multiply(self.learning_rate)
        return parameter.subtract(step)

    def apply_gradients(self, gradients: Gradients) -> None:
        """Update every weight and bias matrix from ``gradients``.

        All new parameters are computed before any is assigned, so a
        mismatched ``gradients`` leaves the network unchanged.
        """
        layers = self.layer_count - 1
        if len(gradients.weights) != layers or len(gradients.biases) != layers:
            raise ValueError(
                f"Expected gradients for {layers} layers, got {len(gradients.weights)} weight "
                f"and {len(gradients.biases)} bias matrices",
            )

        weights = [self._step(w, g) for w, g in zip(self.weights, gradients.weights)]
        biases = [self._step(b, g) for b, g in zip(self.biases, gradients.biases)]
        self.weights = weights
        self.biases = biases

    def back_propagate(self, target: Vector) -> Gradients:
        """Compute gradients for ``target`` and apply them."""
        gradients = self.compute_gradients(target)
        self.apply_gradients(gradients)
        return gradients

    def train(
        self,
        dataset: Dataset,
        iterations: int,
        sampling: Union[SampleOrder, str] = SampleOrder.SEQUENTIAL,
        index: int = 0,
        indices: Optional[Sequence[int]] = None,
        seed: Optional[int] = None,
        log_interval: int = DEFAULT_LOG_INTERVAL,
        progress_callback: Optional[Callable[[str, float], None]] = None,
    ) -> TrainingReport:
        """
        Train on ``dataset`` for ``iterations`` single-sample updates.

        Args:
            dataset: Samples to train on
            iterations: Number of forward/backward/update cycles
            sampling: Order in which samples are visited
            index: Sample used with ``SampleOrder.FIXED``
            indices: Explicit sample indices, cycled; overrides ``sampling``
            seed: Seed for ``SampleOrder.SHUFFLED``
            log_interval: Record and log the cost every this many iterations
            progress_callback: Optional callback receiving (message, percentage)

        Returns:
            TrainingReport with the cost history of the run
        """
        if iterations < 1:
            raise ValueError("iterations must be a positive integer")
        if log_interval < 1:
            raise ValueError("log_interval must be a positive integer")
        if dataset.feature_count != self.structure[0]:
            raise ShapeMismatchError(
                "train on",
                (self.structure[0], 1),
                (dataset.feature_count, 1),
                f"Dataset has {dataset.feature_count} features but the input layer has {self.structure[0]} neurons",
            )

        sampling = SampleOrder(sampling)
        report = TrainingReport(
            structure=list(self.structure),
            learning_rate=self.learning_rate,
            update_rule=self.update_rule.value,
            sampling="explicit" if indices is not None else sampling.value,
            iterations=iterations,
            start_time=time.time(),
        )

        total_cost = 0.0
        cost = None
        schedule = iter_sample_indices(len(dataset), iterations, sampling, index=index, indices=indices, seed=seed)
        for iteration, sample_index in enumerate(schedule):
            image, _ = dataset[sample_index]
            target = dataset.target(sample_index, self.output_size)

            self.forward_propagate(image)
            cost = self.cost(target)
            total_cost += cost
            self.back_propagate(target)
            logger.debug("Iteration %d sample %d cost %.6f", iteration, sample_index, cost)

            if iteration % log_interval == 0:
                report.record(iteration, sample_index, cost)
                logger.info("Iteration %d/%d, cost %.6f", iteration, iterations, cost)
                if progress_callback:
                    progress_callback(f"Iteration {iteration}/{iterations}", 100.0 * iteration / iterations)

        report.final_cost = cost
        report.mean_cost = total_cost / iterations
        report.duration = time.time() - report.start_time
        if progress_callback:
            progress_callback("Training complete", 100.0)
        return report

    def predict(self, inputs: Vector) -> int:
        """Return the index of the most active output neuron."""
        output = self.forward_propagate(inputs)
        scores = [output.get(i, 0) for i in range(self.output_size)]
        return max(range(len(scores)), key=scores.__getitem__)

    def evaluate(
        self,
        dataset: Dataset,
        limit: Optional[int] = None,
        progress_callback: Optional[Callable[[str, float], None]] = None,
    ) -> float:
        """
        Fraction of ``dataset`` whose label matches ``predict``.

        Args:
            dataset: Samples to classify
            limit: Only classify the first ``limit`` samples
            progress_callback: Optional callback receiving (message, percentage)
        """
        if limit is not None and limit < 1:
            raise ValueError("limit must be a positive integer")
        total = len(dataset) if limit is None else min(limit, len(dataset))
        report_every = max(1, total // 10)

        correct = 0
        for i in range(total):
            if progress_callback and i % report_every == 0:
                progress_callback(f"Evaluating {i}/{total}", 100.0 * i / total)
            if self.predict(dataset.images[i]) == dataset.labels[i]:
                correct += 1

        logger.info("Evaluated %d samples, accuracy %.4f", total, correct / total)
        if progress_callback:
            progress_callback("Evaluation complete", 100.0)
        return correct / total

    def __repr__(self) -> str:
        return f"Network(structure={self.structure}, learning_rate={self.learning_rate}, update_rule={self.update_rule.value})"
