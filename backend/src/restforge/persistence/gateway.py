"""ModelGateway Protocol — the data-access interface actions depend on."""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class ModelGateway(Protocol):
    """Interface every gateway must implement.

    Keys arrive as strings from the URL; gateways coerce them to the
    primary key's type. A key that cannot be coerced matches nothing.
    key_name is None for views and tables without a single-column key;
    such gateways only serve unkeyed actions.
    """

    table_name: str

    @property
    def key_name(self) -> str | None: ...

    @property
    def columns(self) -> list[str]: ...

    def find_by_key(self, key: Any) -> dict[str, Any] | None: ...

    def search(
        self,
        filters: dict[str, Any] | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[dict[str, Any]]: ...

    def create(self, data: dict[str, Any]) -> dict[str, Any]: ...

    def update(self, key: Any, data: dict[str, Any]) -> int: ...

    def destroy(self, key: Any) -> int: ...
