"""
Meta Call Parsing Errors

Every failure raised while decoding, hashing or verifying a meta call is a
subclass of ``ParsingError``, so a caller can reject a transaction with a
single ``except`` clause while still telling the kinds apart.

Exception Hierarchy:
    ParsingError (root)
    ├── ArgumentParseError
    ├── InvalidMetaTransactionMethodName
    ├── InvalidMetaTransactionFunctionArg
    ├── InvalidEcRecoverSignature
    └── ArgsLengthMismatch
"""


class ParsingError(Exception):
    """
    Root exception class for meta call parsing failures.

    Parsing is pure, so none of these errors is retryable: the same input
    always fails the same way.
    """
    pass


class ArgumentParseError(ParsingError):
    """
    Raised when raw input bytes or type text cannot be decoded.

    This includes scenarios such as:
    - Truncated or oversized wire envelope
    - Non UTF-8 string fields
    - Malformed RLP argument payload
    - Unrecognized type token in a method definition
    - Nesting deeper than the configured bound
    """
    pass


class InvalidMetaTransactionMethodName(ParsingError):
    """
    Raised when a method definition violates the method grammar.

    E.g. a missing parenthesis, a missing argument name, a space after a
    comma, or a struct declared twice.
    """
    pass


class InvalidMetaTransactionFunctionArg(ParsingError):
    """
    Raised when an argument value does not fit its declared type.

    This includes scenarios such as:
    - A list supplied where a byte string is expected, or the reverse
    - An address that is not 20 bytes long
    - An integer wider than 32 bytes
    - A reference to a struct type that was never declared
    """
    pass


class InvalidEcRecoverSignature(ParsingError):
    """
    Raised when the signer cannot be recovered from the signature.

    Malformed lengths, out of range recovery ids and non-recovering
    signatures all surface as this same error.
    """
    pass


class ArgsLengthMismatch(ParsingError):
    """
    Raised when the number of decoded values differs from the number of
    declared arguments or struct fields.
    """
    pass


__all__ = [
    "ParsingError",
    "ArgumentParseError",
    "InvalidMetaTransactionMethodName",
    "InvalidMetaTransactionFunctionArg",
    "InvalidEcRecoverSignature",
    "ArgsLengthMismatch",
]
