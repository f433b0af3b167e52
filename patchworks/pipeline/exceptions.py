"""Exceptions raised by the upgrade pipeline."""


class PipelineError(Exception):
    """Base exception for run-level pipeline failures."""

    pass


class PipelineCancelledError(PipelineError):
    """Raised when the operator declines to continue at the confirmation gate."""

    DEFAULT_MESSAGE = "Operation cancelled by the user."

    def __init__(self, message: str = DEFAULT_MESSAGE, result=None):
        super().__init__(message)
        self.message = message
        # PipelineRunResult with cancelled=True and the fetch stats so far
        self.result = result


class PipelineStageError(PipelineError):
    """Raised when a stage cannot run because the pipeline is wired incorrectly."""

    def __init__(self, stage: str, message: str):
        super().__init__(f"{stage}: {message}")
        self.stage = stage
        self.message = message
