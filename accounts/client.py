"""Read-only access to account profiles.

Other apps never touch ``Account`` rows directly; they resolve user ids to
:class:`AccountData` through :class:`AuthServiceClient`.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Iterable, List, Optional

from django.contrib.auth import get_user_model

from .models import Account


@dataclass(frozen=True)
class AccountData:
    user_id: int
    name: str
    surname: str
    email: str
    role: str
    is_external_auth: bool
    middle_name: str = ""

    def as_dict(self) -> dict:
        return asdict(self)


def _to_account_data(user) -> AccountData:
    account = getattr(user, "account", None)
    return AccountData(
        user_id=user.pk,
        name=user.first_name,
        surname=user.last_name,
        email=user.email,
        role=account.role if account else Account.Role.STUDENT,
        is_external_auth=account.is_external_auth if account else False,
        middle_name=account.middle_name if account else "",
    )


class AuthServiceClient:
    def get_account_data(self, user_id: int) -> Optional[AccountData]:
        user = (
            get_user_model()
            .objects.select_related("account")
            .filter(pk=user_id)
            .first()
        )
        return _to_account_data(user) if user else None

    def get_accounts_data(self, user_ids: Iterable[int]) -> List[AccountData]:
        """Return account data for every known id, in the order given.

        Duplicated ids are returned once; unknown ids are skipped.
        """

        ordered_ids = list(dict.fromkeys(user_ids))
        users = (
            get_user_model()
            .objects.select_related("account")
            .in_bulk(ordered_ids)
        )
        return [_to_account_data(users[pk]) for pk in ordered_ids if pk in users]

    def get_account_by_email(self, email: str) -> Optional[AccountData]:
        user = (
            get_user_model()
            .objects.select_related("account")
            .filter(email__iexact=email)
            .first()
        )
        return _to_account_data(user) if user else None

    def get_all_lecturers(self) -> List[AccountData]:
        users = (
            get_user_model()
            .objects.select_related("account")
            .filter(account__role=Account.Role.LECTURER)
            .order_by("last_name", "first_name")
        )
        return [_to_account_data(user) for user in users]

    def get_role(self, user) -> str:
        account = getattr(user, "account", None)
        return account.role if account else Account.Role.STUDENT
