"""Unit tests for deployment options."""

import pytest

from proxy_deployments.exceptions import UnknownUnsafeAllowError
from proxy_deployments.options import DeployProxyOptions, parse_unsafe_allow
from proxy_deployments.types import ProxyKind, UnsafeAllow


class TestResolveKind:
    """Test proxy kind defaults."""

    def test_defaults_to_transparent(self):
        """Test that ordinary deployments default to transparent proxies."""
        assert DeployProxyOptions().resolve_kind() is ProxyKind.TRANSPARENT

    def test_deterministic_defaults_to_uups(self, create2_factory):
        """Test that CREATE2 deployments default to UUPS proxies."""
        options = DeployProxyOptions(deploy_factory=create2_factory, deploy_factory_salt="salt")
        assert options.resolve_kind() is ProxyKind.UUPS

    def test_explicit_kind_wins(self, create2_factory):
        """Test that an explicit kind overrides the defaults."""
        options = DeployProxyOptions(
            kind=ProxyKind.TRANSPARENT, deploy_factory=create2_factory, deploy_factory_salt=1
        )
        assert options.resolve_kind() is ProxyKind.TRANSPARENT

    @pytest.mark.parametrize("value", ["transparent", "uups", "beacon"])
    def test_kind_from_string(self, value: str):
        """Test that kinds can be given as strings."""
        assert DeployProxyOptions(kind=value).kind is ProxyKind(value)

    def test_unknown_kind(self):
        """Test that unknown kinds are rejected."""
        with pytest.raises(ValueError, match="Unknown proxy kind"):
            DeployProxyOptions(kind="diamond")


class TestDeterministicOptions:
    """Test the CREATE2 option pair."""

    def test_not_deterministic_by_default(self):
        assert not DeployProxyOptions().is_deterministic

    def test_factory_without_salt(self, create2_factory):
        """Test that a factory needs a salt."""
        with pytest.raises(ValueError, match="together"):
            DeployProxyOptions(deploy_factory=create2_factory)

    def test_salt_without_factory(self):
        """Test that a salt needs a factory."""
        with pytest.raises(ValueError, match="together"):
            DeployProxyOptions(deploy_factory_salt="salt")


class TestInitializerOption:
    """Test initializer option validation."""

    @pytest.mark.parametrize("value", [None, False, "initialize", "initialize(uint256)"])
    def test_accepted_values(self, value):
        assert DeployProxyOptions(initializer=value).initializer == value

    @pytest.mark.parametrize("value", [True, 1, ["initialize"]])
    def test_rejected_values(self, value):
        with pytest.raises(ValueError):
            DeployProxyOptions(initializer=value)


class TestUnsafeAllow:
    """Test unsafe-allow parsing."""

    def test_strings_converted(self):
        """Test that identifiers are converted to enum members."""
        options = DeployProxyOptions(unsafe_allow=["delegatecall", "selfdestruct"])

        assert options.unsafe_allow == frozenset(
            {UnsafeAllow.DELEGATECALL, UnsafeAllow.SELFDESTRUCT}
        )

    def test_all_known_identifiers(self):
        """Test that every validator check identifier is accepted."""
        identifiers = [
            "state-variable-assignment",
            "state-variable-immutable",
            "external-library-linking",
            "struct-definition",
            "enum-definition",
            "constructor",
            "delegatecall",
            "selfdestruct",
            "missing-public-upgradeto",
        ]
        assert len(parse_unsafe_allow(identifiers)) == len(identifiers)

    def test_enum_members_accepted(self):
        assert parse_unsafe_allow([UnsafeAllow.CONSTRUCTOR]) == frozenset({UnsafeAllow.CONSTRUCTOR})

    def test_single_string(self):
        """Test that a bare string is one identifier, not characters."""
        assert parse_unsafe_allow("constructor") == frozenset({UnsafeAllow.CONSTRUCTOR})

    def test_unknown_identifier_rejected(self):
        """Test that unknown identifiers are rejected rather than ignored."""
        with pytest.raises(UnknownUnsafeAllowError, match="no-such-check"):
            DeployProxyOptions(unsafe_allow=["constructor", "no-such-check"])

    def test_default_is_empty(self):
        assert DeployProxyOptions().unsafe_allow == frozenset()
