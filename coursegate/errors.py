"""Exception types raised by the CourseGate core."""


class CourseGateError(Exception):
    """Base class for all CourseGate errors."""


class NotFoundError(CourseGateError):
    """A required course, lesson, quiz set or record does not exist."""

    def __init__(self, kind: str, key):
        self.kind = kind
        self.key = key
        super().__init__(f"{kind} not found: {key}")


class RemoteStoreError(CourseGateError):
    """The remote store failed to complete a read or write."""


class ValidationError(CourseGateError):
    """Input rejected before any store call was attempted."""


class QuizNotPassedError(CourseGateError):
    """Lesson completion refused because the quiz score is below the pass mark."""

    def __init__(self, score_percentage: float, required_percentage: float):
        self.score_percentage = score_percentage
        self.required_percentage = required_percentage
        super().__init__(
            f"Quiz score {score_percentage:.0f}% is below the required {required_percentage:.0f}%"
        )
