"""Spec module - API spec model, validation and normalization."""

from docdrift.spec.application.loader import load_spec
from docdrift.spec.application.normalize import canonical_json, is_normalized, normalize
from docdrift.spec.application.validate import SpecValidationResult, assert_spec, validate_spec
from docdrift.spec.domain.enums import ExportKind, Visibility
from docdrift.spec.domain.models import ApiExport, ApiSignature, ApiSpec, ApiType, SpecMeta

__all__ = [
    "ApiExport",
    "ApiSignature",
    "ApiSpec",
    "ApiType",
    "SpecMeta",
    "ExportKind",
    "Visibility",
    "SpecValidationResult",
    "assert_spec",
    "validate_spec",
    "normalize",
    "canonical_json",
    "is_normalized",
    "load_spec",
]
