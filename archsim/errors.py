"""Package exceptions."""


class ArchsimError(Exception):
    """Base class for errors raised by archsim."""


class FeedbackUnavailable(ArchsimError):
    """The supplementary-feedback collaborator could not produce feedback."""
