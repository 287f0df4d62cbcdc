"""Role-based authorization for gateway governance."""

from retail_core.constants import DEFAULT_ADMIN_ROLE
from retail_core.errors import AccessControlBadConfirmationError, AccessControlUnauthorizedAccountError
from retail_core.events import RoleGranted, RoleRevoked


class AccessControlMixin:
    """Grant/revoke/check of named roles.

    ``DEFAULT_ADMIN_ROLE`` administers every role. Role membership lives in
    ``self._state.roles`` so it is rolled back together with the rest of the
    gateway state.
    """

    def has_role(self, role: str, account: str) -> bool:
        return account in self._state.roles.get(role, set())

    def _check_role(self, role: str, account: str) -> None:
        if not self.has_role(role, account):
            raise AccessControlUnauthorizedAccountError(account, role)

    def _grant_role(self, role: str, account: str, sender: str) -> bool:
        members = self._state.roles.setdefault(role, set())
        if account in members:
            return False
        members.add(account)
        self._emit(RoleGranted(role=role, account=account, sender=sender))
        return True

    def _revoke_role(self, role: str, account: str, sender: str) -> bool:
        members = self._state.roles.get(role, set())
        if account not in members:
            return False
        members.discard(account)
        self._emit(RoleRevoked(role=role, account=account, sender=sender))
        return True

    def grant_role(self, role: str, account: str, *, caller: str) -> None:
        self._check_role(DEFAULT_ADMIN_ROLE, caller)
        self._grant_role(role, account, caller)

    def revoke_role(self, role: str, account: str, *, caller: str) -> None:
        self._check_role(DEFAULT_ADMIN_ROLE, caller)
        self._revoke_role(role, account, caller)

    def renounce_role(self, role: str, account: str, *, caller: str) -> None:
        if account != caller:
            raise AccessControlBadConfirmationError()
        self._revoke_role(role, account, caller)
