"""
Custom exceptions for Thansin Chat.

These exceptions are intentionally simple and descriptive.
They are used across:

  - core/api/        (generation capability adapter)
  - core/classifier/ (failure classification)
  - runtime/agents/  (turn dispatch)

Placing them at the project root (exceptions/) avoids circular imports
and keeps exception types consistent across modules.
"""


class MissingCredentialException(Exception):
    """
    Raised before any network call when the API credential is absent or is
    an obvious placeholder (e.g. "PLACEHOLDER_API_KEY").

    The failure classifier maps this exception to the `auth` error kind.
    """

    def __init__(self, variable_name="OPENAI_API_KEY"):
        self.variable_name = variable_name
        msg = (
            f"{variable_name} is missing or still set to a placeholder value. "
            "Export a real key in your environment or define it in a .env file."
        )
        super().__init__(msg)


class DispatcherNotReadyException(Exception):
    """
    Raised when a turn is dispatched before a generation backend has been
    attached to the dispatcher.

    Classified as `general`.
    """

    def __init__(self, details=None):
        self.details = details or "No generation backend is configured."
        super().__init__(self.details)


class EmptyCompletionException(Exception):
    """
    Raised when the generation capability answers without any choices at all
    (as opposed to a choice whose text is empty).

    Example:
        completion.choices == []   ← raises this exception
        choices[0].content == ""   ← handled with the persona fallback line
    """

    def __init__(self, model=None):
        self.model = model
        msg = "Empty response from the generation API"
        if model:
            msg += f" (model: {model})"
        super().__init__(msg + ".")
