class StudyTimerError(Exception):
    """Base class for errors raised by the study timer engine."""


class CollaboratorError(StudyTimerError):
    """A remote collaborator failed or answered with something unusable."""


class CourseServiceError(CollaboratorError):
    """The course API could not be read or updated."""
