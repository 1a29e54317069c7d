class SeriousPeopleError(Exception):
    """Base exception for the Serious People backend."""

    retryable: bool = False


class ContextNotReadyError(SeriousPeopleError):
    """Raised when generation is requested before upstream coaching data exists.

    Retryable: the interview/module pipeline may still be writing the context.
    """

    retryable = True

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f"Coaching context for user '{user_id}' is not ready yet")


class PlanBusyError(SeriousPeopleError):
    """Raised when another request holds the plan-creation lock for too long."""

    retryable = True

    def __init__(self, user_id: str, waited: float):
        self.user_id = user_id
        self.waited = waited
        super().__init__(f"Plan creation for user '{user_id}' is busy (waited {waited:.1f}s)")


class PlanNotFoundError(SeriousPeopleError):
    """Raised when a user has no Serious Plan."""

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f"No Serious Plan found for user '{user_id}'")


class ArtifactNotFoundError(SeriousPeopleError):
    """Raised when an artifact does not exist or belongs to another user."""

    def __init__(self, artifact_id):
        self.artifact_id = artifact_id
        super().__init__(f"Artifact '{artifact_id}' not found")


class ArtifactStateError(SeriousPeopleError):
    """Raised when an artifact is not in a state that allows the operation."""

    def __init__(self, artifact_id, status: str, operation: str):
        self.artifact_id = artifact_id
        self.status = status
        self.operation = operation
        super().__init__(f"Cannot {operation} artifact '{artifact_id}' while it is {status}")


class ContentGenerationError(SeriousPeopleError):
    """Raised by content generators when a draft cannot be produced or parsed."""

    retryable = True

    def __init__(self, artifact_key: str, reason: str):
        self.artifact_key = artifact_key
        self.reason = reason
        super().__init__(f"Generation failed for '{artifact_key}': {reason}")


class ArtifactCatalogError(SeriousPeopleError):
    """Raised when a configured artifact catalog names unknown or duplicate kinds."""

    def __init__(self, user_id: str, reason: str):
        self.user_id = user_id
        self.reason = reason
        super().__init__(f"Invalid artifact catalog for user '{user_id}': {reason}")
