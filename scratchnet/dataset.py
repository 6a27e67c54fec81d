"""Training data: an immutable in-memory dataset and an IDX file reader.

The IDX format stores a big-endian header followed by unsigned bytes:

- images: magic 2051, record count, rows, columns, then ``rows * columns``
  pixels per record in row-major order (16-byte header)
- labels: magic 2049, record count, then one byte per record (8-byte header)
"""

import logging
import struct
from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from .errors import DatasetFormatError, IndexOutOfRangeError
from .matrix import Matrix

logger = logging.getLogger("scratchnet.dataset")

IMAGE_MAGIC = 2051
LABEL_MAGIC = 2049
IMAGE_HEADER = struct.Struct(">IIII")
LABEL_HEADER = struct.Struct(">II")
PIXEL_SCALE = 255.0

# One shared float per byte value
PIXEL_VALUES = tuple(value / PIXEL_SCALE for value in range(256))

PathLike = Union[str, Path]


def one_hot(label: int, size: int) -> Matrix:
    """Return a ``(size, 1)`` column with a 1 at ``label`` and 0 elsewhere."""
    target = Matrix(size, 1, 0.0)
    target.set(label, 0, 1.0)
    return target


@dataclass(frozen=True)
class Dataset:
    """Parallel sequences of feature vectors and integer class labels."""

    images: tuple[tuple[float, ...], ...]
    labels: tuple[int, ...]
    feature_count: int = field(init=False)

    def __post_init__(self) -> None:
        images = tuple(tuple(float(v) for v in image) for image in self.images)
        labels = tuple(int(label) for label in self.labels)
        if len(images) != len(labels):
            raise DatasetFormatError(f"Dataset has {len(images)} images but {len(labels)} labels")
        if not images:
            raise DatasetFormatError("Dataset must contain at least one sample")
        width = len(images[0])
        for index, image in enumerate(images):
            if len(image) != width:
                raise DatasetFormatError(f"Image {index} has {len(image)} features, expected {width}")
        object.__setattr__(self, "images", images)
        object.__setattr__(self, "labels", labels)
        object.__setattr__(self, "feature_count", width)

    @classmethod
    def from_samples(cls, images: Sequence[Sequence[float]], labels: Sequence[int]) -> "Dataset":
        return cls(tuple(tuple(image) for image in images), tuple(labels))

    def __len__(self) -> int:
        return len(self.labels)

    def __getitem__(self, index: int) -> tuple[tuple[float, ...], int]:
        self._check_index(index)
        return self.images[index], self.labels[index]

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self):
            raise IndexOutOfRangeError(f"Sample index {index} out of range for dataset of {len(self)} samples")

    def target(self, index: int, size: int) -> Matrix:
        """One-hot target column for sample ``index`` over ``size`` classes."""
        self._check_index(index)
        label = self.labels[index]
        if not 0 <= label < size:
            raise IndexOutOfRangeError(f"Label {label} of sample {index} does not fit {size} output classes")
        return one_hot(label, size)


def count_labels(labels: Sequence[int]) -> dict[int, int]:
    """Histogram of ``labels`` ordered by label."""
    return dict(sorted(Counter(labels).items()))


def _read_header(data: bytes, header: struct.Struct, magic: int, path: PathLike) -> tuple[int, ...]:
    if len(data) < header.size:
        raise DatasetFormatError(f"{path}: file too small for IDX header ({len(data)} bytes)")
    fields = header.unpack_from(data, 0)
    if fields[0] != magic:
        raise DatasetFormatError(f"{path}: bad magic number {fields[0]}, expected {magic}")
    return fields


def read_idx_images(path: PathLike, limit: Optional[int] = None) -> list[tuple[float, ...]]:
    """Read an IDX image file into flat pixel vectors normalised to [0, 1]."""
    data = Path(path).read_bytes()
    _, count, rows, columns = _read_header(data, IMAGE_HEADER, IMAGE_MAGIC, path)
    record_size = rows * columns
    if limit is not None:
        count = min(count, limit)

    expected = IMAGE_HEADER.size + count * record_size
    if len(data) < expected:
        raise DatasetFormatError(f"{path}: truncated image data, expected {expected} bytes, got {len(data)}")

    images = []
    for i in range(count):
        offset = IMAGE_HEADER.size + i * record_size
        record = data[offset : offset + record_size]
        images.append(tuple(PIXEL_VALUES[pixel] for pixel in record))

    logger.debug("Read %d images of %dx%d from %s", count, rows, columns, path)
    return images


def read_idx_labels(path: PathLike, limit: Optional[int] = None) -> list[int]:
    """Read an IDX label file into a list of integer labels."""
    data = Path(path).read_bytes()
    _, count = _read_header(data, LABEL_HEADER, LABEL_MAGIC, path)
    if limit is not None:
        count = min(count, limit)

    expected = LABEL_HEADER.size + count
    if len(data) < expected:
        raise DatasetFormatError(f"{path}: truncated label data, expected {expected} bytes, got {len(data)}")

    logger.debug("Read %d labels from %s", count, path)
    return list(data[LABEL_HEADER.size : expected])


def read_idx_header(path: PathLike) -> dict[str, int]:
    """Return the decoded header fields of an IDX image or label file."""
    with Path(path).open("rb") as f:
        data = f.read(IMAGE_HEADER.size)
    if len(data) >= 4 and struct.unpack(">I", data[:4])[0] == IMAGE_MAGIC:
        _, count, rows, columns = _read_header(data, IMAGE_HEADER, IMAGE_MAGIC, path)
        return {"magic": IMAGE_MAGIC, "count": count, "rows": rows, "columns": columns}
    _, count = _read_header(data, LABEL_HEADER, LABEL_MAGIC, path)
    return {"magic": LABEL_MAGIC, "count": count}


def load_dataset(images_path: PathLike, labels_path: PathLike, limit: Optional[int] = None) -> Dataset:
    """Load a paired IDX image file and label file into a ``Dataset``."""
    if limit is not None and limit < 1:
        raise ValueError("limit must be a positive integer")

    images = read_idx_images(images_path, limit)
    labels = read_idx_labels(labels_path, limit)
    if len(images) != len(labels):
        raise DatasetFormatError(
            f"Image file {images_path} has {len(images)} records but label file {labels_path} has {len(labels)}"
        )

    logger.info("Loaded %d samples from %s", len(labels), images_path)
    return Dataset(tuple(images), tuple(labels))
