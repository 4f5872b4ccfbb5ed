"""
S3 credential profiles.

Named key pairs, the shared registry that resolves them, and the
interactive credential check used when editing them.
"""

from .profile import Profile
from .registry import ProfileRegistry
from .credentials import CredentialCheck, check_credentials

__all__ = [
    "Profile",
    "ProfileRegistry",
    "CredentialCheck",
    "check_credentials",
]
