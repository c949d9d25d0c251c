"""Engine — the sequential provisioning pipeline."""
