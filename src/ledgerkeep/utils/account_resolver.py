"""Utility for resolving account names to IDs."""

from ledgerkeep.domain.account import AccountService
from ledgerkeep.domain.errors import NotFoundError


def resolve_account(account_service: AccountService, account: str | int) -> int:
    """Resolve account name or ID to account ID.

    Args:
        account_service: AccountService instance
        account: Account name (str) or ID (int or string representation of int)

    Returns:
        Account ID

    Raises:
        NotFoundError: If account is not found
    """
    if isinstance(account, int):
        if account_service.get_account(account) is None:
            raise NotFoundError(f"Account ID {account} not found")
        return account

    # Numeric strings are IDs
    try:
        account_id = int(account)
    except (ValueError, TypeError):
        account_id = None
    if account_id is not None:
        if account_service.get_account(account_id) is None:
            raise NotFoundError(f"Account ID {account_id} not found")
        return account_id

    account_obj = account_service.db.get_account_by_name(account.strip())
    if account_obj is None:
        raise NotFoundError(f"Account '{account}' not found")
    return account_obj.id
