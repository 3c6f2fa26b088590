from credo.services.credentials.cache import CredentialCache
from credo.services.credentials.dto import DBCredentials

__all__ = ["CredentialCache", "DBCredentials"]
