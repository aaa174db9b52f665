"""
Gateway Errors

Exception Hierarchy:
    GatewayError (root)
    ├── MetaCallRejectedError
    ├── IncorrectNonceError
    └── ProxyArgumentError
"""


class GatewayError(Exception):
    """Root exception class for gateway failures."""
    pass


class MetaCallRejectedError(GatewayError):
    """
    Raised when a message fails to decode or verify.

    The underlying ``ParsingError`` is chained as ``__cause__``.
    """
    pass


class IncorrectNonceError(GatewayError):
    """
    Raised when a meta call's nonce is not the sender's next nonce.

    Attributes:
        expected_nonce: Nonce stored for the sender
        provided_nonce: Nonce in the meta call
    """

    def __init__(self, expected_nonce: int, provided_nonce: int):
        super().__init__(
            f"Incorrect nonce: expected {expected_nonce}, got {provided_nonce}"
        )
        self.expected_nonce = expected_nonce
        self.provided_nonce = provided_nonce


class ProxyArgumentError(GatewayError):
    """
    Raised when a verified call cannot be forwarded.

    E.g. an attached value that does not fit in a u128 balance.
    """
    pass
