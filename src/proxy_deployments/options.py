"""Deployment options for proxy-deployments library."""

from dataclasses import dataclass, field
from typing import Any, FrozenSet, Iterable, Literal, Optional, Union

from .create2 import Salt
from .exceptions import UnknownUnsafeAllowError
from .types import ProxyKind, UnsafeAllow


def parse_unsafe_allow(values: Iterable[Union[str, UnsafeAllow]]) -> FrozenSet[UnsafeAllow]:
    """
    Convert unsafe-allow identifiers to UnsafeAllow members.

    Args:
        values: Identifiers such as "delegatecall", or UnsafeAllow members

    Returns:
        Frozen set of UnsafeAllow members

    Raises:
        UnknownUnsafeAllowError: If an identifier is not a known check
    """
    if isinstance(values, str):
        # A bare string would otherwise be split into characters
        values = [values]

    result = set()
    for value in values:
        if isinstance(value, UnsafeAllow):
            result.add(value)
            continue
        try:
            result.add(UnsafeAllow(value))
        except ValueError:
            known = ", ".join(member.value for member in UnsafeAllow)
            raise UnknownUnsafeAllowError(
                f"Unknown unsafe-allow check '{value}', expected one of: {known}"
            ) from None
    return frozenset(result)


@dataclass(frozen=True)
class DeployProxyOptions:
    """
    Options of a proxy deployment.

    Strings are accepted for ``kind`` and ``unsafe_allow`` and converted
    to their enum members.
    """

    # Proxy protocol, see resolve_kind() for the default
    kind: Optional[ProxyKind] = None

    # Initializer function name or signature, None for "initialize"
    # if present, False to skip initialization
    initializer: Union[str, Literal[False], None] = None

    # Checks the external upgrade-safety validator should not report
    unsafe_allow: FrozenSet[UnsafeAllow] = field(default_factory=frozenset)

    # CREATE2 factory and salt, both or neither
    deploy_factory: Optional[Any] = None
    deploy_factory_salt: Optional[Salt] = None

    def __post_init__(self):
        if self.kind is not None and not isinstance(self.kind, ProxyKind):
            try:
                object.__setattr__(self, "kind", ProxyKind(self.kind))
            except ValueError:
                known = ", ".join(member.value for member in ProxyKind)
                raise ValueError(f"Unknown proxy kind '{self.kind}', expected one of: {known}") from None

        object.__setattr__(self, "unsafe_allow", parse_unsafe_allow(self.unsafe_allow))

        if self.initializer is True or not isinstance(self.initializer, (str, type(None), bool)):
            raise ValueError(f"initializer must be a function name or False, got {self.initializer!r}")

        if (self.deploy_factory is None) != (self.deploy_factory_salt is None):
            raise ValueError("deploy_factory and deploy_factory_salt must be given together")

    @property
    def is_deterministic(self) -> bool:
        """True if contracts are created through a CREATE2 factory."""
        return self.deploy_factory is not None

    def resolve_kind(self) -> ProxyKind:
        """
        Get the proxy kind to deploy.

        Returns:
            The explicit kind, else UUPS for CREATE2 deployments, else transparent
        """
        if self.kind is not None:
            return self.kind
        if self.is_deterministic:
            return ProxyKind.UUPS
        return ProxyKind.TRANSPARENT
