"""Exception taxonomy.

HTTP mapping lives in the route modules:
- ConfigMissing: raised at startup, never reaches a request.
- MissingParameter: 400 on the success callback.
- SessionLookupFailed: 500 on the success callback.
- PaymentLinkCreationFailed: recovered inside the messaging flow as an
  error reply; never surfaces as an HTTP status.
"""


class JokewallError(Exception):
    """Base class for all jokewall errors."""


class ConfigMissing(JokewallError):
    """A required environment variable is absent or invalid."""


class MissingParameter(JokewallError):
    """A required request parameter was not supplied."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Missing {name}")
        self.name = name


class SessionLookupFailed(JokewallError):
    """The checkout session could not be retrieved from the payment provider."""


class PaymentLinkCreationFailed(JokewallError):
    """Creating the checkout session or dispatching its link failed."""
