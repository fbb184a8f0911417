"""Identifier value objects for type-safe, hierarchy-aware identifier handling.

This module provides strongly-typed identifier value objects that enforce
runtime validation across all bounded contexts. Every identifier wraps a
UUID. Scoped identifiers carry their owning scope so that equality, hashing
and ordering account for the full hierarchy key::

    TenantId
      └── OrganizationId (optional parent OrganizationId, same tenant)
            └── DepartmentId

Equal raw values under different tenants are never equal.

Example:
    >>> from strata.foundation.domain.identifiers import OrganizationId, TenantId
    >>> tenant = TenantId.generate()
    >>> root = OrganizationId.generate(tenant)
    >>> child = OrganizationId.generate(tenant, parent=root)
    >>> child.is_descendant_of(root)
    True
"""

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass, field
from functools import total_ordering
from typing import TYPE_CHECKING, ClassVar, Self
from uuid import UUID

from strata.foundation.domain.exceptions import FormatError, HierarchyError

if TYPE_CHECKING:
    from collections.abc import Iterator

__all__ = [
    "DepartmentId",
    "EntityId",
    "OrganizationId",
    "TenantId",
    "UserId",
]

_UUID_PATTERN = re.compile(
    r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"
)


def _parse_uuid(identifier_type: str, raw: object) -> UUID:
    """Parse a canonical UUID string, raising FormatError on anything else."""
    if isinstance(raw, UUID):
        return raw
    if not isinstance(raw, str):
        raise FormatError(identifier_type, raw)
    candidate = raw.strip()
    if not _UUID_PATTERN.match(candidate):
        raise FormatError(identifier_type, raw)
    return UUID(candidate.lower())


class _Identifier:
    """Shared comparison behaviour for identifier value objects.

    Subclasses provide ``_sort_key()``: the raw value first, then the
    hierarchy key. Comparison across identifier types is not supported.
    """

    __slots__ = ()

    value: UUID

    def _sort_key(self) -> tuple[str, ...]:
        raise NotImplementedError

    def compare(self, other: Self) -> int:
        """Three-way comparison: -1, 0 or 1.

        Raises:
            TypeError: If ``other`` is a different identifier type.
        """
        if type(other) is not type(self):
            msg = f"Cannot compare {type(self).__name__} with {type(other).__name__}"
            raise TypeError(msg)
        mine, theirs = self._sort_key(), other._sort_key()
        return (mine > theirs) - (mine < theirs)

    def __lt__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._sort_key() < other._sort_key()  # type: ignore[attr-defined]

    def __str__(self) -> str:
        """Return UUID string for serialization."""
        return str(self.value)


@total_ordering
@dataclass(frozen=True, slots=True)
class TenantId(_Identifier):
    """Tenant identifier. Root of the identity hierarchy.

    Attributes:
        value: The wrapped UUID instance.

    Raises:
        FormatError: If value is not a UUID.

    Example:
        >>> TenantId.from_string("550e8400-e29b-41d4-a716-446655440000")
        TenantId(value=UUID('550e8400-e29b-41d4-a716-446655440000'))
    """

    value: UUID

    def __post_init__(self) -> None:
        if not isinstance(self.value, UUID):
            raise FormatError("TenantId", self.value)

    @classmethod
    def generate(cls) -> TenantId:
        return cls(uuid.uuid4())

    @classmethod
    def from_string(cls, raw: str) -> TenantId:
        return cls(_parse_uuid("TenantId", raw))

    def _sort_key(self) -> tuple[str, ...]:
        return (str(self.value),)


@total_ordering
@dataclass(frozen=True, slots=True)
class OrganizationId(_Identifier):
    """Organization identifier scoped to a tenant, with an optional parent.

    The parent organization is navigational only: it does not take part in
    equality or hashing, so an organization is identified by its value and
    owning tenant.

    Attributes:
        value: The wrapped UUID instance.
        tenant_id: Owning tenant.
        parent: Optional parent organization within the same tenant.

    Raises:
        FormatError: If value is not a UUID.
        HierarchyError: If tenant_id is missing, the parent belongs to a
            different tenant, or the organization is its own parent.
    """

    value: UUID
    tenant_id: TenantId
    parent: OrganizationId | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if not isinstance(self.value, UUID):
            raise FormatError("OrganizationId", self.value)
        if not isinstance(self.tenant_id, TenantId):
            raise HierarchyError(
                "organization_id.tenant_id",
                "Organization must belong to a tenant",
            )
        if self.parent is None:
            return
        if self.parent.tenant_id != self.tenant_id:
            raise HierarchyError(
                "organization_id.parent",
                "Parent organization must belong to the same tenant",
                tenant_id=str(self.tenant_id),
                parent_tenant_id=str(self.parent.tenant_id),
            )
        if self.parent.value == self.value:
            raise HierarchyError(
                "organization_id.parent",
                "Organization cannot be its own parent",
            )

    @classmethod
    def generate(
        cls, tenant_id: TenantId, parent: OrganizationId | None = None
    ) -> OrganizationId:
        return cls(uuid.uuid4(), tenant_id, parent)

    @classmethod
    def from_string(
        cls,
        tenant_id: TenantId,
        raw: str,
        parent: OrganizationId | None = None,
    ) -> OrganizationId:
        return cls(_parse_uuid("OrganizationId", raw), tenant_id, parent)

    def ancestors(self) -> Iterator[OrganizationId]:
        """Iterate parent organizations from nearest to root."""
        current = self.parent
        while current is not None:
            yield current
            current = current.parent

    @property
    def depth(self) -> int:
        """Number of ancestors (0 for a root organization)."""
        return sum(1 for _ in self.ancestors())

    def is_descendant_of(self, other: OrganizationId) -> bool:
        return any(ancestor == other for ancestor in self.ancestors())

    def is_ancestor_of(self, other: OrganizationId) -> bool:
        return other.is_descendant_of(self)

    def belongs_to(self, ancestor: TenantId | OrganizationId) -> bool:
        """Whether this organization sits under ``ancestor``.

        A tenant ancestor matches the owning tenant; an organization
        ancestor matches any organization in the parent chain.
        """
        if isinstance(ancestor, TenantId):
            return self.tenant_id == ancestor
        return self.is_descendant_of(ancestor)

    def _sort_key(self) -> tuple[str, ...]:
        return (str(self.value), str(self.tenant_id.value))


@total_ordering
@dataclass(frozen=True, slots=True)
class DepartmentId(_Identifier):
    """Department identifier owned by an organization.

    Attributes:
        value: The wrapped UUID instance.
        organization_id: Owning organization.

    Raises:
        FormatError: If value is not a UUID.
        HierarchyError: If organization_id is missing.
    """

    value: UUID
    organization_id: OrganizationId

    def __post_init__(self) -> None:
        if not isinstance(self.value, UUID):
            raise FormatError("DepartmentId", self.value)
        if not isinstance(self.organization_id, OrganizationId):
            raise HierarchyError(
                "department_id.organization_id",
                "Department must belong to an organization",
            )

    @classmethod
    def generate(cls, organization_id: OrganizationId) -> DepartmentId:
        return cls(uuid.uuid4(), organization_id)

    @classmethod
    def from_string(cls, organization_id: OrganizationId, raw: str) -> DepartmentId:
        return cls(_parse_uuid("DepartmentId", raw), organization_id)

    @property
    def tenant_id(self) -> TenantId:
        return self.organization_id.tenant_id

    def belongs_to(self, ancestor: TenantId | OrganizationId) -> bool:
        if isinstance(ancestor, TenantId):
            return self.tenant_id == ancestor
        return self.organization_id == ancestor or self.organization_id.is_descendant_of(
            ancestor
        )

    def _sort_key(self) -> tuple[str, ...]:
        return (
            str(self.value),
            str(self.organization_id.value),
            str(self.organization_id.tenant_id.value),
        )


@total_ordering
@dataclass(frozen=True, slots=True)
class UserId(_Identifier):
    """User identifier, optionally scoped to the user's home tenant.

    Attributes:
        value: The wrapped UUID instance.
        tenant_id: Home tenant, if known.

    Example:
        >>> from uuid import UUID
        >>> UserId(UUID("550e8400-e29b-41d4-a716-446655440000"))
        UserId(value=UUID('550e8400-e29b-41d4-a716-446655440000'), tenant_id=None)
    """

    value: UUID
    tenant_id: TenantId | None = None

    _UNSCOPED: ClassVar[str] = ""

    def __post_init__(self) -> None:
        if not isinstance(self.value, UUID):
            raise FormatError("UserId", self.value)
        if self.tenant_id is not None and not isinstance(self.tenant_id, TenantId):
            raise HierarchyError("user_id.tenant_id", "Tenant must be a TenantId")

    @classmethod
    def generate(cls, tenant_id: TenantId | None = None) -> UserId:
        return cls(uuid.uuid4(), tenant_id)

    @classmethod
    def from_string(cls, raw: str, tenant_id: TenantId | None = None) -> UserId:
        return cls(_parse_uuid("UserId", raw), tenant_id)

    def belongs_to(self, ancestor: TenantId) -> bool:
        return self.tenant_id is not None and self.tenant_id == ancestor

    def _sort_key(self) -> tuple[str, ...]:
        tenant = str(self.tenant_id.value) if self.tenant_id else self._UNSCOPED
        return (str(self.value), tenant)


@total_ordering
@dataclass(frozen=True, slots=True)
class EntityId(_Identifier):
    """Generic entity identifier wrapping UUID."""

    value: UUID

    def __post_init__(self) -> None:
        if not isinstance(self.value, UUID):
            raise FormatError("EntityId", self.value)

    @classmethod
    def generate(cls) -> EntityId:
        return cls(uuid.uuid4())

    @classmethod
    def from_string(cls, raw: str) -> EntityId:
        return cls(_parse_uuid("EntityId", raw))

    def _sort_key(self) -> tuple[str, ...]:
        return (str(self.value),)
