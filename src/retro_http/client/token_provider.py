"""Default authorization token storage"""

from typing import Optional


class TokenProvider:
    """
    Holds a default authorization token

    Reads and writes are unsynchronized; concurrent ``set_token`` calls race
    and the last write wins. Clients read the token once per call when the
    request is built.
    """

    def __init__(self, token: Optional[str] = None) -> None:
        self._token = token

    def get_token(self) -> Optional[str]:
        return self._token

    def set_token(self, token: Optional[str]) -> None:
        self._token = token


# Process-wide token shared by every client created without its own provider
default_token_provider = TokenProvider()
