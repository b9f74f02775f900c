"""Route claim table — one owner per (verb, path)."""

from dataclasses import dataclass

from restforge.errors import ConfigurationError


def _segments(path: str) -> tuple[str | None, ...]:
    """Path segments with every ``{param}`` replaced by None."""
    return tuple(
        None if part.startswith("{") and part.endswith("}") else part
        for part in path.strip("/").split("/")
    )


def specificity(path: str) -> tuple[bool, ...]:
    """Sort key: literal segments before parameters, left to right."""
    return tuple(part is None for part in _segments(path))


@dataclass(frozen=True)
class RouteClaim:
    verb: str
    path: str
    owner: str


class RouteTable:
    """Records which action owns each (verb, path) pair.

    Claims are kept in registration order. Two claims collide when some
    request path matches both patterns. That is allowed only when one
    pattern is strictly more specific (its parameters are a subset of the
    other's), so it can be matched first; anything else is a
    configuration error, never a silent shadow.
    """

    def __init__(self):
        self._claims: dict[tuple[str, str], RouteClaim] = {}

    def _conflict(self, verb: str, path: str) -> RouteClaim | None:
        new = _segments(path)
        for (claimed_verb, claimed_path), claim in self._claims.items():
            old = _segments(claimed_path)
            if claimed_verb != verb or len(old) != len(new):
                continue
            if any(a is not None and b is not None and a != b for a, b in zip(old, new)):
                continue
            new_params = {i for i, part in enumerate(new) if part is None}
            old_params = {i for i, part in enumerate(old) if part is None}
            if new_params == old_params or not (
                new_params < old_params or old_params < new_params
            ):
                return claim
        return None

    def claim(self, verb: str, path: str, owner: str) -> RouteClaim:
        verb = verb.upper()
        existing = self._conflict(verb, path)
        if existing is not None:
            if existing.path == path:
                detail = f"{verb} {path} is claimed by both"
            else:
                detail = f"{verb} {path} overlaps {existing.path}, claimed by both"
            raise ConfigurationError(f"Route collision: {detail} {existing.owner} and {owner}")
        claim = RouteClaim(verb=verb, path=path, owner=owner)
        self._claims[(verb, path)] = claim
        return claim

    def __contains__(self, item: tuple[str, str]) -> bool:
        verb, path = item
        return (verb.upper(), path) in self._claims

    def __iter__(self):
        return iter(self._claims.values())

    def __len__(self) -> int:
        return len(self._claims)
