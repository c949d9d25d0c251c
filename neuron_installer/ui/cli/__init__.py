"""CLI sub-command groups registered by ``neuron_installer.main``."""
