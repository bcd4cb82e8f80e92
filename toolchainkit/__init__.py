"""In-memory object store, status-condition helpers, an apply client and event mappers for toolchain operators."""

__version__ = "0.1.0"

__all__ = [
    "apply",
    "condition",
    "github",
    "handlers",
    "kube",
    "resources_controller",
]