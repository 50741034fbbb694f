"""Credential, file and profile stores consumed by the CLI under test."""

from clitestpack.stores.credentials import CredentialStore, FixedCredentialStore, KeyFileStore
from clitestpack.stores.exceptions import CredentialFileError, ProfileFormatError, StoreError
from clitestpack.stores.files import FileProbe, LocalFileProbe, StubFileProbe
from clitestpack.stores.profile import PROFILE_FILE_NAME, Profile, ProfileStore, Subscription
from clitestpack.stores.services import (
    AZURE_CONFIG_DIR_ENV_VAR,
    Services,
    StandIns,
    azure_dir,
    get_services,
    use_services,
)

__all__ = [
    "StoreError",
    "CredentialFileError",
    "ProfileFormatError",
    "CredentialStore",
    "FixedCredentialStore",
    "KeyFileStore",
    "FileProbe",
    "LocalFileProbe",
    "StubFileProbe",
    "PROFILE_FILE_NAME",
    "Profile",
    "ProfileStore",
    "Subscription",
    "AZURE_CONFIG_DIR_ENV_VAR",
    "Services",
    "StandIns",
    "azure_dir",
    "get_services",
    "use_services",
]
