class PanoTourError(Exception):
    pass


class SubmissionError(PanoTourError, ValueError):
    """Upload rejected before a job was created."""


class ImageValidationError(PanoTourError):
    pass


class ToolConfigError(PanoTourError):
    """krpano tools path is not configured or does not exist."""
