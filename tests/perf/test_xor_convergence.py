import numpy as np
import pytest

from nlayernet.core.activations import Sigmoid
from nlayernet.core.types import CONVERGED, MAX_ITERATIONS, Topology
from nlayernet.core.weights import WeightStore
from nlayernet.data.truth_table import Dataset
from nlayernet.reporting.metrics import MetricsCapture
from nlayernet.training.trainer import Trainer

XOR = Dataset.from_pairs([([0, 0], [0]), ([0, 1], [1]), ([1, 0], [1]), ([1, 1], [0])])
THRESHOLD = 0.0002


@pytest.mark.perf
@pytest.mark.parametrize("seed", range(5))
def test_bias_free_xor_training_is_well_behaved(seed):
    # Without bias units a 2-2-1 network usually settles on a plateau
    # (average error near 0.0625 or 0.087) instead of the threshold.
    capture = MetricsCapture()
    weights = WeightStore.random(Topology.of([2, 2, 1]), -1.5, 1.5, np.random.default_rng(seed))
    result = Trainer(
        weights,
        Sigmoid(),
        lr=0.3,
        error_threshold=THRESHOLD,
        max_iterations=5000,
        callbacks=[capture],
    ).train(XOR)

    errors = capture.errors
    assert 1 <= result.iterations <= 5000
    assert len(errors) == result.iterations
    assert result.average_error == errors[-1]
    assert result.average_error <= errors[0]
    assert all(err > THRESHOLD for err in errors[:-1])
    if result.average_error <= THRESHOLD:
        assert result.stop_reason == CONVERGED
    else:
        assert result.stop_reason == MAX_ITERATIONS
        assert result.iterations == 5000
    assert np.all((result.outputs > 0.0) & (result.outputs < 1.0))


@pytest.mark.perf
def test_deeper_network_reduces_and_or_xor_error():
    dataset = Dataset.from_pairs(
        [([0, 0], [0, 0, 0]), ([0, 1], [0, 1, 1]), ([1, 0], [0, 1, 1]), ([1, 1], [1, 1, 0])]
    )
    weights = WeightStore.random(Topology.of([2, 5, 3]), -1.5, 1.5, np.random.default_rng(0))
    capture = MetricsCapture()
    result = Trainer(
        weights,
        Sigmoid(),
        lr=0.3,
        error_threshold=THRESHOLD,
        max_iterations=5000,
        callbacks=[capture],
    ).train(dataset)
    assert result.average_error < capture.errors[0]
    assert result.iterations <= 5000
