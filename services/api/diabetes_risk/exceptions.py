class DiabetesRiskError(Exception):
    """Base exception for the inference pipeline."""


class ModelLoadError(DiabetesRiskError):
    """The model artifact is missing, malformed or the runtime failed to start."""


class ModelInvocationError(DiabetesRiskError):
    """The loaded session rejected the inputs or crashed while running."""
