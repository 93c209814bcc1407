# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar

if TYPE_CHECKING:
    from .definition import DispatchKind
    from .identity import OperationIdentity

__all__ = (
    "FeatureFlagError",
    "RegistrationError",
    "MissingFlagConfiguration",
    "InvalidDispatchBody",
    "InvalidDispatchHead",
    "FlagConfigurationError",
    "UnconfiguredIdentity",
    "MatchError",
)


class FeatureFlagError(Exception):
    default_message: ClassVar[str] = "Feature flag error"
    status_code: ClassVar[int] = 500

    def __init__(
        self,
        message: str | None = None,
        *,
        details: dict[str, Any] | None = None,
        status_code: int | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message or self.default_message)
        if cause:
            self.__cause__ = cause
        self.message = message or self.default_message
        self.details = details or {}
        self.status_code = status_code or self.status_code

    def to_dict(self, *, include_cause: bool = False) -> dict[str, Any]:
        data = {
            "error": self.__class__.__name__,
            "message": self.message,
            "status_code": self.status_code,
            **({"details": self.details} if self.details else {}),
        }
        if include_cause and (cause := self.get_cause()):
            data["cause"] = repr(cause)
        return data

    def get_cause(self) -> Exception | None:
        """Get the cause of this error, if any."""
        return self.__cause__ if hasattr(self, "__cause__") else None


class RegistrationError(FeatureFlagError):
    """Raised while registering an operation; the operation is never made callable."""

    default_message = "Feature flag registration failed"


class MissingFlagConfiguration(RegistrationError):
    """No flag value exists for the identity being registered."""

    default_message = "Missing feature flag configuration"

    def __init__(
        self,
        identity: OperationIdentity,
        message: str | None = None,
        **kw: Any,
    ):
        self.identity = identity
        message = message or (
            f"No feature flag value configured for {identity}.\n"
            f"Seed it before the operation is registered, e.g. "
            f"FEATURE_FLAG_FLAGS='{{\"{identity}\": <value>}}' in the "
            f"environment, an entry in the FEATURE_FLAG_FLAGS_FILE document, "
            f"or featureflag.set({identity.as_tuple()!r}, <value>)."
        )
        details = {"identity": str(identity), **kw.pop("details", {})}
        super().__init__(message, details=details, **kw)

    def __reduce__(self):
        return (self.__class__, (self.identity, self.message), self.__dict__)


class InvalidDispatchBody(RegistrationError):
    """The branches supplied for an operation are malformed."""

    default_message = "Invalid feature flag dispatch body"


class InvalidDispatchHead(RegistrationError):
    """An operation identity could not be derived from the declaration."""

    default_message = "Invalid feature flag dispatch head"


class FlagConfigurationError(FeatureFlagError):
    """Static flag configuration could not be loaded."""

    default_message = "Invalid feature flag configuration"


class UnconfiguredIdentity(FeatureFlagError):
    """The registry holds no value for the requested identity."""

    default_message = "Feature flag identity is not configured"
    status_code = 404

    def __init__(
        self,
        identity: OperationIdentity,
        message: str | None = None,
        **kw: Any,
    ):
        self.identity = identity
        message = message or (
            f"Feature flag {identity} has no configured value"
        )
        details = {"identity": str(identity), **kw.pop("details", {})}
        super().__init__(message, details=details, **kw)

    def __reduce__(self):
        return (self.__class__, (self.identity, self.message), self.__dict__)


class MatchError(FeatureFlagError):
    """The current flag value matched none of the declared branches.

    Carries everything needed to render the diagnostic: the operation
    identity, the dispatch kind, the ordered pattern descriptions (empty for
    boolean dispatch) and the offending value.
    """

    default_message = "Feature flag value did not match"
    status_code = 422

    def __init__(
        self,
        identity: OperationIdentity,
        kind: DispatchKind,
        expected: tuple[str, ...],
        actual: Any,
    ):
        from .formatter import format_match_error

        self.identity = identity
        self.kind = kind
        self.expected = tuple(expected)
        self.actual = actual
        super().__init__(
            format_match_error(self),
            details={
                "identity": str(identity),
                "kind": kind.value,
                "expected": list(self.expected),
                "actual": repr(actual),
            },
        )

    def __reduce__(self):
        return (
            self.__class__,
            (self.identity, self.kind, self.expected, self.actual),
        )
