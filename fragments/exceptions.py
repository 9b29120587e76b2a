"""Custom exception classes for the fragments service."""


class FragmentsException(Exception):
    """
    Base exception class for all fragment-related errors.
    """
    pass


class FragmentValidationError(FragmentsException):
    """
    Raised when a fragment is constructed or written with invalid attributes.
    """
    pass


class FragmentNotFoundError(FragmentsException):
    """
    Raised when a fragment (metadata or payload) does not exist for an owner.
    """
    pass


class UnsupportedTypeError(FragmentsException):
    """
    Raised when a client submits a Content-Type the service does not store.
    """
    pass


class ContentMismatchError(FragmentsException):
    """
    Raised when uploaded bytes do not match their declared Content-Type.
    """
    pass


class TypeChangeError(FragmentsException):
    """
    Raised when an update tries to change the type of an existing fragment.
    """
    pass


class ConversionError(FragmentsException):
    """
    Raised when a stored payload cannot be converted.
    """
    pass


class UnsupportedConversionError(ConversionError):
    """
    Raised when the requested representation is not reachable from the source type.
    """

    def __init__(self, source_type: str, target: str):
        self.source_type = source_type
        self.target = target
        super().__init__(f"Unsupported conversion from {source_type} to {target}")


class PayloadTooLargeError(FragmentsException):
    """
    Raised when a payload exceeds the configured size ceiling.
    """
    pass


class InvalidCredentialsError(FragmentsException):
    """
    Raised when Basic credentials are missing or do not match the password file.
    """
    pass


class StorageError(FragmentsException):
    """
    Raised when the metadata table or blob store rejects an operation.
    """
    pass
