"""Resolver for provider enrollment lookup tables.

Resolves coded reference values by code or description, follows the generic
RelationshipSetting join table from a provider type to related lookups, and
falls back to the full list of beneficial owner types when no relation is
configured for an entity structure.

The resolver only reads. The session it is given is owned by the caller.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence, TypeVar

from sqlalchemy import and_
from sqlmodel import Session, col, select

from shared.models import (
    AgreementDocument,
    ApplicantType,
    BeneficialOwnerType,
    EntityStructureType,
    HasRelationshipJoin,
    LookupEntity,
    ProviderType,
    RelationshipSetting,
    RelationshipType,
    ServiceAssuranceExtType,
    ServiceAssuranceType,
)

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=LookupEntity)

# ProviderType.applicant_type flag per applicant kind
_APPLICANT_FLAGS: dict[ApplicantType, int] = {
    ApplicantType.INDIVIDUAL: 0,
    ApplicantType.ORGANIZATION: 1,
}


class LookupIntegrityError(RuntimeError):
    """A lookup that must be unique matched more than one row."""

    def __init__(self, model_name: str, field: str, value: str, count: int):
        super().__init__(
            "Lookup table contains non unique element. "
            f"{model_name}.{field}={value!r} matched {count} rows"
        )
        self.model_name = model_name
        self.field = field
        self.value = value
        self.count = count


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def _one_or_none(rows: Sequence[T], model: type[T], field: str, value: str) -> Optional[T]:
    """Return the single row, None when empty, raise when not unique."""
    if not rows:
        return None
    if len(rows) > 1:
        logger.error(
            "Lookup %s.%s=%r is not unique (%d rows)",
            model.__name__,
            field,
            value,
            len(rows),
        )
        raise LookupIntegrityError(model.__name__, field, value, len(rows))
    return rows[0]


def _join_condition(model: type[HasRelationshipJoin], code_column: Any) -> Any:
    """ON clause linking ``code_column`` to the settings rows tagged for ``model``."""
    return and_(
        code_column == RelationshipSetting.related_entity_code,
        RelationshipSetting.related_entity_type == model.related_entity_type,
    )


class LookupResolver:
    """Read-only lookups against the enrollment reference tables."""

    def __init__(self, session: Session):
        """Initialize the resolver.

        Args:
            session: Open database session. Acquired and closed by the caller.
        """
        self.session = session

    def get_provider_types(
        self, applicant_type: ApplicantType | str | None = None
    ) -> list[ProviderType]:
        """Retrieve provider types filtered by applicant type.

        Args:
            applicant_type: INDIVIDUAL or ORGANIZATION, or their string values
                ("individual", "organization"). Any other value, including
                None, returns every provider type.

        Returns:
            Matching provider types (possibly empty)
        """
        stmt = select(ProviderType)
        flag = _APPLICANT_FLAGS.get(applicant_type)  # type: ignore[call-overload]
        if flag is not None:
            stmt = stmt.where(ProviderType.applicant_type == flag)
        logger.debug("Fetching provider types for applicant_type=%s", applicant_type)
        return list(self.session.exec(stmt).all())

    def find_by_description(self, model: type[T], description: Optional[str]) -> Optional[T]:
        """Retrieve the lookup with the given description.

        Args:
            model: Lookup table to search
            description: Exact description to match

        Returns:
            The matching row, or None when blank or not found

        Raises:
            LookupIntegrityError: If more than one row has the description
        """
        if _is_blank(description):
            return None
        return self._find_unique(model, "description", col(model.description), description)

    def find_by_code(self, model: type[T], code: Optional[str]) -> Optional[T]:
        """Retrieve the lookup with the given code.

        Args:
            model: Lookup table to search
            code: Exact code to match

        Returns:
            The matching row, or None when blank or not found

        Raises:
            LookupIntegrityError: If more than one row has the code
        """
        if _is_blank(code):
            return None
        return self._find_unique(model, "code", col(model.code), code)

    def _find_unique(self, model: type[T], field: str, column: Any, value: str) -> Optional[T]:
        stmt = select(model).where(column == value)
        logger.debug("Fetching %s where %s=%r", model.__name__, field, value)
        rows = self.session.exec(stmt).all()
        return _one_or_none(rows, model, field, value)

    def find_related(
        self,
        model: type[T],
        provider_type_code: str,
        relationship_type: RelationshipType | str,
    ) -> list[T]:
        """Find lookups related to a provider type through RelationshipSetting.

        Args:
            model: Lookup table to return rows from
            provider_type_code: Code on the provider side of the relation
            relationship_type: Kind of relation to follow

        Returns:
            Related rows of ``model`` (empty when nothing is configured)
        """
        if isinstance(relationship_type, RelationshipType):
            relationship_type = relationship_type.value
        stmt = self._related_statement(model, col(model.code), provider_type_code).where(
            RelationshipSetting.relationship_type == relationship_type
        )
        logger.debug(
            "Fetching %s related to provider type %s via %s",
            model.__name__,
            provider_type_code,
            relationship_type,
        )
        return list(self.session.exec(stmt).all())

    def find_required_documents(self, provider_type_code: str) -> list[AgreementDocument]:
        """Find all the agreements required for the given provider type.

        Documents are matched on ``AgreementDocument.type`` regardless of the
        setting's relationship type.
        """
        stmt = self._related_statement(
            AgreementDocument, col(AgreementDocument.type), provider_type_code
        )
        logger.debug("Fetching required documents for provider type %s", provider_type_code)
        return list(self.session.exec(stmt).all())

    def _related_statement(self, model: type[T], code_column: Any, provider_type_code: str) -> Any:
        return (
            select(model)
            .join(RelationshipSetting, _join_condition(model, code_column))
            .where(RelationshipSetting.provider_type_code == provider_type_code)
        )

    def find_all(self, model: type[T]) -> list[T]:
        """Retrieve every row of the given lookup table."""
        logger.debug("Fetching all %s", model.__name__)
        return list(self.session.exec(select(model)).all())

    def find_beneficial_owner_types(
        self, entity_structure_description: Optional[str]
    ) -> list[BeneficialOwnerType]:
        """Retrieve the owner types allowed for an entity structure.

        Tries in order:
        1. Resolve the EntityStructureType by description
        2. Follow its BENEFICIAL_OWNER_TYPE relations
        3. Fall back to every BeneficialOwnerType when the structure is
           unknown or has no relations configured

        Args:
            entity_structure_description: Description of the corporate structure

        Returns:
            Allowed beneficial owner types

        Raises:
            LookupIntegrityError: If the structure description is not unique
        """
        structure = self.find_by_description(EntityStructureType, entity_structure_description)
        if structure is None:
            logger.info(
                "No entity structure %r, returning all beneficial owner types",
                entity_structure_description,
            )
            return self.find_all(BeneficialOwnerType)

        results = self.find_related(
            BeneficialOwnerType, structure.code, RelationshipType.BENEFICIAL_OWNER_TYPE
        )
        if not results:
            logger.info(
                "Entity structure %s has no owner type relations, "
                "returning all beneficial owner types",
                structure.code,
            )
            return self.find_all(BeneficialOwnerType)
        return results

    def find_assured_service_types(self, indicator: str) -> list[ServiceAssuranceType]:
        """Retrieve the assured service types for an in/out patient indicator."""
        stmt = select(ServiceAssuranceType).where(ServiceAssuranceType.patient_ind == indicator)
        logger.debug("Fetching assured service types for indicator=%s", indicator)
        return list(self.session.exec(stmt).all())

    def find_assured_service_ext_types(self, code: str) -> list[ServiceAssuranceExtType]:
        """Retrieve the extended service types under a parent service code."""
        stmt = select(ServiceAssuranceExtType).where(
            ServiceAssuranceExtType.service_assurance_code == code
        )
        logger.debug("Fetching assured service ext types under %s", code)
        return list(self.session.exec(stmt).all())
