"""
Error taxonomy shared by the codec, the TKY2JGD client and the pipeline.
"""

from typing import Optional


class GeoConvError(Exception):
    """Base class for every failure raised by this package."""


class FormatError(GeoConvError, ValueError):
    """Malformed sexagesimal / decimal text."""


class GpxFormatError(FormatError):
    pass


class GpseFormatError(FormatError):
    pass


class ConversionError(GeoConvError):
    """
    Fatal failure of one step of the Web TKY2JGD workflow.
    Carries the step number, the observed HTTP status (None on timeout or
    connection failure) and the requested URL.
    """

    step: int = 0
    step_name: str = ""

    def __init__(self, detail: str, status: Optional[int] = None, url: str = ""):
        self.detail = detail
        self.status = status
        self.url = url
        super().__init__(
            f"step {self.step}/4 ({self.step_name}) failed: {detail}"
            f" [status={status if status is not None else '-'} url={url}]"
        )


class SubmissionError(ConversionError):
    step = 1
    step_name = "submit"


class TriggerError(ConversionError):
    step = 2
    step_name = "trigger"


class RetrievalError(ConversionError):
    step = 4
    step_name = "retrieve"


class FollowWarning(UserWarning):
    """Step 3 (redirect follow) answered with a non-success status."""


class LengthMismatchError(GeoConvError):
    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"converter returned {actual} coordinate pairs for {expected} inputs"
        )
