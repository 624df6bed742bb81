"""
actor-kernel: process-oriented message dispatch for declarative UI apps.

Public API re-exports from kernel/ (machinery).
"""
from .kernel import *  # noqa: F401, F403
from .kernel import __all__ as _kernel_all

__version__ = "0.1.0"

__all__ = [*_kernel_all, "__version__"]
