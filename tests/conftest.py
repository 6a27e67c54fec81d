import logging

import pytest

from scratchnet.dataset import Dataset
from tests.idx_utils import write_idx_images, write_idx_labels


@pytest.fixture(autouse=True)
def setup_logging():
    """Set up logging for tests."""
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    # Suppress excessive logging during tests
    logging.getLogger("scratchnet").setLevel(logging.CRITICAL)

    yield

    # Reset logging after test
    logging.getLogger("scratchnet").setLevel(logging.NOTSET)


@pytest.fixture
def tiny_dataset():
    """Four 2-pixel samples over two classes."""
    return Dataset.from_samples(
        [[0.0, 1.0], [1.0, 0.0], [0.1, 0.9], [0.9, 0.1]],
        [0, 1, 0, 1],
    )


@pytest.fixture
def idx_files(tmp_path):
    """Write a small 2x2 IDX image/label pair and return their paths."""
    images = [
        [0, 255, 0, 255],
        [255, 0, 255, 0],
        [0, 0, 255, 255],
    ]
    labels = [1, 0, 2]
    images_path = tmp_path / "images.idx3-ubyte"
    labels_path = tmp_path / "labels.idx1-ubyte"
    write_idx_images(images_path, images, 2, 2)
    write_idx_labels(labels_path, labels)
    return images_path, labels_path


@pytest.fixture
def mock_progress_callback():
    """Return a mock progress callback function that records calls."""
    progress_messages = []
    progress_percentages = []

    def progress_callback(message, percentage):
        progress_messages.append(message)
        progress_percentages.append(percentage)

    # Add the recorded messages and percentages as attributes
    progress_callback.messages = progress_messages  # type: ignore[attr-defined]
    progress_callback.percentages = progress_percentages  # type: ignore[attr-defined]

    return progress_callback


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers",
        "slow: mark test as slow (deselect with '-m \"not slow\"')",
    )
    config.addinivalue_line("markers", "integration: mark test as integration test")


def pytest_collection_modifyitems(config, items):
    """Auto-mark tests based on their names."""
    for item in items:
        if "integration" in item.name.lower() or "end_to_end" in item.name.lower():
            item.add_marker(pytest.mark.integration)

        if "convergence" in item.name.lower():
            item.add_marker(pytest.mark.slow)
