"""Store subsystem exceptions."""


class StoreError(Exception):
    """Base class for credential and profile store errors."""


class CredentialFileError(StoreError):
    """Credential file is missing a certificate or private key block."""


class ProfileFormatError(StoreError):
    """Profile document is not valid JSON or lacks required fields."""
