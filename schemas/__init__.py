"""
Pydantic schemas for data validation and serialization.

Schemas:
    drafts: Normalizer output (agreement, job role, salary floor,
            particularity and benefit drafts)
    imports: Import requests, results, counts and run history responses

Usage:
    from schemas.drafts import RecordDrafts, AgreementDraft
    from schemas.imports import ImportResult, ImportCounts
"""

__all__ = [
    "UnionDraft",
    "AgreementDraft",
    "JobRoleDraft",
    "SalaryFloorDraft",
    "ParticularityDraft",
    "BenefitDraft",
    "RecordDrafts",
    "ImportCounts",
    "ImportResult",
    "ImportRequest",
    "ImportRunResponse",
    "ImportRunList",
    "ImportResponse",
    "HealthCheckResponse",
]
