"""Neuron Node Builder installer — clone, configure, build and link the Neuron stack."""

__version__ = "0.3.0"
