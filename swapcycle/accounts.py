"""Account pool of local signing identities built from private keys."""

from dataclasses import dataclass, field

from eth_account import Account as EthAccount
from eth_account.signers.local import LocalAccount

from config.settings import ConfigError


@dataclass(frozen=True)
class Account:
    address: str
    signer: LocalAccount = field(repr=False, compare=False)

    @property
    def label(self) -> str:
        return self.address[:6]

    @classmethod
    def from_key(cls, private_key: str) -> "Account":
        signer = EthAccount.from_key(private_key)
        return cls(address=signer.address, signer=signer)


def load_accounts(private_keys) -> list[Account]:
    """Build the account pool in configured order, rejecting duplicates."""
    accounts = []
    seen = set()
    for position, key in enumerate(private_keys, start=1):
        try:
            account = Account.from_key(key)
        except (ValueError, TypeError) as e:
            raise ConfigError(f"private key #{position} is invalid: {e}") from None
        if account.address in seen:
            raise ConfigError(f"private key #{position} duplicates {account.address}")
        seen.add(account.address)
        accounts.append(account)
    return accounts
