"""FastAPI router for enrollment lookup tables.

Provides one read-only endpoint per resolver operation:
- GET /lookups/provider-types: Provider types, optionally by applicant type
- GET /lookups/beneficial-owner-types: Owner types allowed for a structure
- GET /lookups/required-documents: Agreements required for a provider type
- GET /lookups/assured-services: Service types by in/out patient indicator
- GET /lookups/assured-services/{code}/ext-types: Extended service types
- GET /lookups/{variant}: Every row of a lookup table
- GET /lookups/{variant}/by-code/{code}: Single lookup by code
- GET /lookups/{variant}/by-description: Single lookup by description
- GET /lookups/{variant}/related: Lookups related to a provider type
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, ConfigDict, Field
from shared.lookup_resolver import LookupResolver
from shared.models import LOOKUP_MODELS, ApplicantType, LookupEntity

from api_service.dependencies import get_resolver

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/lookups", tags=["lookups"])


# --- Response models ---


class LookupResponse(BaseModel):
    """A single lookup row. Variant-specific columns are None elsewhere."""

    model_config = ConfigDict(from_attributes=True)

    code: str
    description: str
    entity_type: str = Field(validation_alias="related_entity_type")
    applicant_type: int | None = None
    patient_ind: str | None = None
    service_assurance_code: str | None = None
    type: str | None = None
    title: str | None = None
    version: int | None = None


# --- Endpoints ---


@router.get("/provider-types", response_model=list[LookupResponse])
def list_provider_types(
    applicant_type: ApplicantType | None = Query(default=None),
    resolver: LookupResolver = Depends(get_resolver),
) -> list[LookupResponse]:
    """List provider types; without applicant_type every type is returned."""
    return [_to_response(p) for p in resolver.get_provider_types(applicant_type)]


@router.get("/beneficial-owner-types", response_model=list[LookupResponse])
def list_beneficial_owner_types(
    entity_structure: str | None = Query(default=None),
    resolver: LookupResolver = Depends(get_resolver),
) -> list[LookupResponse]:
    """List owner types allowed for an entity structure description.

    Unknown structures, and structures with no configured relations, get the
    full list of owner types.
    """
    return [_to_response(o) for o in resolver.find_beneficial_owner_types(entity_structure)]


@router.get("/required-documents", response_model=list[LookupResponse])
def list_required_documents(
    provider_type_code: str = Query(...),
    resolver: LookupResolver = Depends(get_resolver),
) -> list[LookupResponse]:
    """List the agreement documents a provider type must accept."""
    return [_to_response(d) for d in resolver.find_required_documents(provider_type_code)]


@router.get("/assured-services", response_model=list[LookupResponse])
def list_assured_services(
    indicator: str = Query(...),
    resolver: LookupResolver = Depends(get_resolver),
) -> list[LookupResponse]:
    """List assured service types for an in/out patient indicator."""
    return [_to_response(s) for s in resolver.find_assured_service_types(indicator)]


@router.get("/assured-services/{code}/ext-types", response_model=list[LookupResponse])
def list_assured_service_ext_types(
    code: str,
    resolver: LookupResolver = Depends(get_resolver),
) -> list[LookupResponse]:
    """List extended service types under a parent service code."""
    return [_to_response(s) for s in resolver.find_assured_service_ext_types(code)]


@router.get("/{variant}", response_model=list[LookupResponse])
def list_lookups(
    variant: str,
    resolver: LookupResolver = Depends(get_resolver),
) -> list[LookupResponse]:
    """List every row of a lookup table."""
    model = _get_model(variant)
    return [_to_response(e) for e in resolver.find_all(model)]


@router.get("/{variant}/by-code/{code}", response_model=LookupResponse)
def get_lookup_by_code(
    variant: str,
    code: str,
    resolver: LookupResolver = Depends(get_resolver),
) -> LookupResponse:
    """Get a single lookup by its code."""
    model = _get_model(variant)
    entity = resolver.find_by_code(model, code)
    if entity is None:
        raise HTTPException(
            status_code=404,
            detail=f"No {variant} with code {code}",
        )
    return _to_response(entity)


@router.get("/{variant}/by-description", response_model=LookupResponse)
def get_lookup_by_description(
    variant: str,
    description: str = Query(...),
    resolver: LookupResolver = Depends(get_resolver),
) -> LookupResponse:
    """Get a single lookup by its exact description."""
    model = _get_model(variant)
    entity = resolver.find_by_description(model, description)
    if entity is None:
        raise HTTPException(
            status_code=404,
            detail=f"No {variant} with description {description!r}",
        )
    return _to_response(entity)


@router.get("/{variant}/related", response_model=list[LookupResponse])
def list_related_lookups(
    variant: str,
    provider_type_code: str = Query(...),
    relationship_type: str = Query(...),
    resolver: LookupResolver = Depends(get_resolver),
) -> list[LookupResponse]:
    """List lookups of a table related to a provider type."""
    model = _get_model(variant)
    related = resolver.find_related(model, provider_type_code, relationship_type)
    return [_to_response(e) for e in related]


# --- Helpers ---


def _get_model(variant: str) -> type[LookupEntity]:
    """Resolve a URL slug to its lookup table or raise 404."""
    model = LOOKUP_MODELS.get(variant)
    if model is None:
        raise HTTPException(
            status_code=404,
            detail=f"Unknown lookup {variant}",
        )
    return model


def _to_response(entity: LookupEntity) -> LookupResponse:
    """Convert a lookup row to its response model."""
    return LookupResponse.model_validate(entity)
