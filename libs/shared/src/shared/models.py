"""Shared data models for the provider enrollment lookup tables."""

from __future__ import annotations

from enum import Enum
from typing import ClassVar, Protocol

from sqlmodel import Field, SQLModel


class ApplicantType(str, Enum):
    """Applicant kind used to filter provider types."""

    INDIVIDUAL = "individual"
    ORGANIZATION = "organization"


class RelationshipType(str, Enum):
    """Relation kinds stored in RelationshipSetting.relationship_type."""

    BENEFICIAL_OWNER_TYPE = "BENEFICIAL_OWNER_TYPE"


class HasRelationshipJoin(Protocol):
    """A lookup table that RelationshipSetting rows can point at.

    ``related_entity_type`` is the literal tag stored in
    ``RelationshipSetting.related_entity_type`` for rows targeting this table.
    """

    related_entity_type: ClassVar[str]


class LookupEntity(SQLModel):
    """Base for coded reference values (unique code and description)."""

    related_entity_type: ClassVar[str] = ""

    id: int | None = Field(default=None, primary_key=True)
    code: str = Field(index=True)
    description: str = Field(index=True)


class ProviderType(LookupEntity, table=True):
    """Provider type; applicant_type is 0 for individuals, 1 for organizations."""

    related_entity_type: ClassVar[str] = "ProviderType"

    applicant_type: int = Field(default=0, index=True)


class BeneficialOwnerType(LookupEntity, table=True):
    """Kind of beneficial owner allowed on an enrollment."""

    related_entity_type: ClassVar[str] = "BeneficialOwnerType"


class EntityStructureType(LookupEntity, table=True):
    """Corporate structure of an organization (e.g. Corporation)."""

    related_entity_type: ClassVar[str] = "EntityStructureType"


class ServiceAssuranceType(LookupEntity, table=True):
    """Assured service, split by in/out patient indicator."""

    related_entity_type: ClassVar[str] = "ServiceAssuranceType"

    patient_ind: str | None = Field(default=None, index=True)


class ServiceAssuranceExtType(LookupEntity, table=True):
    """Extended assured service belonging to a parent ServiceAssuranceType."""

    related_entity_type: ClassVar[str] = "ServiceAssuranceExtType"

    service_assurance_code: str = Field(index=True)


class AgreementDocument(LookupEntity, table=True):
    """Agreement a provider must accept; required documents join on ``type``."""

    related_entity_type: ClassVar[str] = "AgreementDocument"

    type: str = Field(index=True)
    title: str | None = Field(default=None)
    version: int | None = Field(default=None)


class RelationshipSetting(SQLModel, table=True):
    """Generic join row tying a provider type to a related lookup code."""

    id: int | None = Field(default=None, primary_key=True)
    provider_type_code: str = Field(index=True)
    relationship_type: str | None = Field(default=None, index=True)
    related_entity_code: str = Field(index=True)
    related_entity_type: str = Field(index=True)


# URL slug -> lookup table, used by the HTTP layer
LOOKUP_MODELS: dict[str, type[LookupEntity]] = {
    "provider-type": ProviderType,
    "beneficial-owner-type": BeneficialOwnerType,
    "entity-structure-type": EntityStructureType,
    "service-assurance-type": ServiceAssuranceType,
    "service-assurance-ext-type": ServiceAssuranceExtType,
    "agreement-document": AgreementDocument,
}
