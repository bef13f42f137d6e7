"""Tensor computation graphs with shape inference, optimisation, memory planning and CPU kernels."""

__version__ = "0.1.0"