"""Exception hierarchy for the S3 bucket publisher."""


class PublisherError(Exception):
    """Base class for all publisher errors."""


class StorageConnectionError(PublisherError, ConnectionError):
    """
    The storage service rejected the credentials or could not be reached.

    Raised by login and the credential check. Fatal to a publish step.
    """


class TransferError(PublisherError, OSError):
    """
    Uploading one file failed (local I/O or S3 protocol error).

    Downgrades the build to UNSTABLE and aborts the rest of the publish pass.
    """

    def __init__(self, message: str, bucket: str = "", key: str = "") -> None:
        super().__init__(message)
        self.bucket = bucket
        self.key = key


__all__ = ["PublisherError", "StorageConnectionError", "TransferError"]
