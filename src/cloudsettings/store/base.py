"""Contracts for cloud variable stores and user identity."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class CloudVariableStore(Protocol):
    """Remote key/value store holding serialized panel settings.

    Implementations raise ``StoreReadError`` from ``read_variable`` when the
    key is absent or the store is unreachable, and ``StoreWriteError`` from
    ``write_variable`` when the write fails.
    """

    def read_variable(self, key: str) -> str:
        ...

    def write_variable(self, key: str, value: str) -> None:
        ...


@runtime_checkable
class UserIdentity(Protocol):
    """Supplies the identifier used to namespace persistence keys."""

    @property
    def user_id(self) -> str:
        ...


class StaticUserIdentity:
    """Identity with a fixed user id."""

    def __init__(self, user_id: str):
        if not user_id:
            raise ValueError("user_id must not be empty")
        self._user_id = user_id

    def __repr__(self) -> str:
        return f"StaticUserIdentity({self._user_id!r})"

    @property
    def user_id(self) -> str:
        return self._user_id
