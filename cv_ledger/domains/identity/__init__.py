from cv_ledger.domains.identity.entities import Account
from cv_ledger.domains.identity.schemas import (
    AccountBase, AccountCreate, AccountLogin, AccountResponse, Token, TokenData
)
from cv_ledger.domains.identity.services import IdentityService

__all__ = [
    "Account",
    "AccountBase", "AccountCreate", "AccountLogin", "AccountResponse",
    "Token", "TokenData",
    "IdentityService"
]
