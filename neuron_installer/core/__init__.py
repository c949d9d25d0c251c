"""Core — models, configuration, stage services and the pipeline engine."""
