class SubmissionError(Exception):
    """Base class for every condition that ends a submission attempt."""


class ValidationError(SubmissionError):
    pass


class UploadFailed(SubmissionError):
    pass


class ConversionFailed(SubmissionError):
    pass


class AnalysisFailed(SubmissionError):
    pass


class AnalysisTimeout(AnalysisFailed):
    pass


class FeedbackDecodeFailed(SubmissionError):
    pass


class DeadlineExceeded(TimeoutError):
    """Raised by the deadline wrapper when the timer wins the race."""
