"""
Interactive credential check.

Used by configuration surfaces (a settings form, the check_credentials
script) to tell the user whether a key pair works before it is saved.
Returns a result instead of raising so any transport can render it.
"""

from dataclasses import dataclass
from typing import Optional

from s3publisher.exceptions import StorageConnectionError
from s3publisher.profiles.profile import Profile
from s3publisher.storage.s3 import S3Client
from s3publisher.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class CredentialCheck:
    """
    Outcome of a credential check.

    Attributes:
        ok: Whether the credentials were accepted
        message: Human-readable explanation (empty when ok)
    """

    ok: bool
    message: str = ""


def check_credentials(
    name: Optional[str],
    access_key: Optional[str],
    secret_key: Optional[str],
    client: Optional[S3Client] = None,
) -> CredentialCheck:
    """
    Log in with the given credentials; login itself lists buckets.

    A blank ``name`` means the user has not filled the form in yet and is
    reported as ok without contacting S3.

    Args:
        name: Profile name being edited
        access_key: AWS access key id
        secret_key: AWS secret access key
        client: S3 client factory (default: AWS with default settings)

    Returns:
        CredentialCheck with ok=False and the reason if S3 refused
    """
    if not name or not name.strip():
        return CredentialCheck(ok=True)

    profile = Profile(
        name=name.strip(),
        access_key=access_key or "",
        secret_key=secret_key or "",
        client=client if client is not None else S3Client(),
    )
    try:
        session = profile.login()
        profile.logout(session)
    except StorageConnectionError as e:
        logger.error(f"Credential check failed for profile '{profile.name}': {e}")
        return CredentialCheck(ok=False, message=f"Can't connect to S3 service: {e}")

    return CredentialCheck(ok=True)


__all__ = ["CredentialCheck", "check_credentials"]
