"""Error taxonomy shared by the generation boundary, the store and the codec."""


class EchoLearnError(Exception):
    """Base class for errors that carry a user-facing message."""

    user_message = "Something went wrong. Please try again."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.user_message)


class ValidationError(EchoLearnError):
    """Input text was empty or whitespace-only."""

    user_message = "Please provide valid text to turn into flashcards."


class GenerationServiceError(EchoLearnError):
    """The flashcard generator failed or returned an unusable payload."""

    user_message = "Failed to generate flashcards. Please try again."


class GenerationRateLimitError(GenerationServiceError):
    user_message = "Too many requests. Please try again later."


class GenerationConfigError(GenerationServiceError):
    user_message = "Flashcard generator configuration error."


class PersistenceError(EchoLearnError):
    """A save or load against the local store failed."""

    user_message = "Could not save your study progress."


class ExportFormatError(EchoLearnError):
    """An imported backup document is malformed."""

    user_message = "The backup file is not a valid EchoLearn export."


class InvalidTransitionError(EchoLearnError):
    """A session action was requested from a state that does not allow it."""

    user_message = "That action isn't available right now."
