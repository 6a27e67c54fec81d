"""scratchnet package initialization.

The version is defined once in pyproject.toml and read at runtime via
importlib.metadata.
"""

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("scratchnet")
except PackageNotFoundError:
    # Package is not installed or in development mode
    __version__ = "unknown"


# Public API, lazy-loaded so importing the package stays cheap.
_LAZY_IMPORTS: dict[str, tuple[str, str]] = {
    "Matrix": ("scratchnet.matrix", "Matrix"),
    "Network": ("scratchnet.network", "Network"),
    "Gradients": ("scratchnet.network", "Gradients"),
    "UpdateRule": ("scratchnet.network", "UpdateRule"),
    "SampleOrder": ("scratchnet.sampling", "SampleOrder"),
    "Dataset": ("scratchnet.dataset", "Dataset"),
    "load_dataset": ("scratchnet.dataset", "load_dataset"),
    "one_hot": ("scratchnet.dataset", "one_hot"),
    "sigmoid": ("scratchnet.activations", "sigmoid"),
    "sigmoid_prime": ("scratchnet.activations", "sigmoid_prime"),
    "TrainingReport": ("scratchnet.models", "TrainingReport"),
}


def __getattr__(name: str) -> object:
    if name in _LAZY_IMPORTS:
        module_path, attr = _LAZY_IMPORTS[name]
        import importlib

        mod = importlib.import_module(module_path)
        val = getattr(mod, attr)
        # Cache on the module so __getattr__ is not called again
        globals()[name] = val
        return val
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "Dataset",
    "Gradients",
    "Matrix",
    "Network",
    "SampleOrder",
    "TrainingReport",
    "UpdateRule",
    "__version__",
    "load_dataset",
    "one_hot",
    "sigmoid",
    "sigmoid_prime",
]
