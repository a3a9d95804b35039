"""Shared test fixtures and spec factories for the docdrift test suite."""

from typing import Any, Dict, List, Optional

import pytest

from docdrift.spec.domain.models import ApiExport, ApiSpec


def param(name: str, schema: Any = "string", *, required: bool = True, **extra: Any) -> Dict[str, Any]:
    return {"name": name, "schema": schema, "required": required, **extra}


def signature(
    params: Optional[List[Dict[str, Any]]] = None,
    returns: Any = None,
    *,
    returns_description: Optional[str] = None,
    **extra: Any,
) -> Dict[str, Any]:
    data: Dict[str, Any] = {"parameters": params or [], **extra}
    if returns is not None:
        data["returns"] = {"schema": returns, "description": returns_description}
    return data


def tag(name: str, text: str = "", **extra: Any) -> Dict[str, Any]:
    return {"name": name, "text": text, **extra}


def export_data(
    export_id: str,
    name: Optional[str] = None,
    kind: str = "function",
    *,
    signatures: Optional[List[Dict[str, Any]]] = None,
    **extra: Any,
) -> Dict[str, Any]:
    data = {"id": export_id, "name": name or export_id, "kind": kind, **extra}
    if signatures is not None:
        data["signatures"] = signatures
    return data


def make_export(export_id: str, name: Optional[str] = None, kind: str = "function", **extra: Any) -> ApiExport:
    return ApiExport.model_validate(export_data(export_id, name, kind, **extra))


def spec_data(
    exports: Optional[List[Dict[str, Any]]] = None,
    types: Optional[List[Dict[str, Any]]] = None,
    *,
    name: str = "my-lib",
    version: Optional[str] = "1.0.0",
) -> Dict[str, Any]:
    return {"meta": {"name": name, "version": version}, "exports": exports or [], "types": types or []}


def make_spec(
    exports: Optional[List[Dict[str, Any]]] = None,
    types: Optional[List[Dict[str, Any]]] = None,
    **meta: Any,
) -> ApiSpec:
    return ApiSpec.model_validate(spec_data(exports, types, **meta))


@pytest.fixture
def documented_function() -> Dict[str, Any]:
    """A fully and correctly documented function."""
    return export_data(
        "createClient",
        description="Create an API client.",
        tags=[
            tag("param", "{string} baseUrl - Server URL"),
            tag("param", "{number} [timeout] - Request timeout in ms"),
            tag("returns", "{Client} The client"),
        ],
        signatures=[
            signature(
                [param("baseUrl", "string"), param("timeout", "number", required=False)],
                {"$ref": "#/types/Client"},
            )
        ],
    )


@pytest.fixture
def sample_spec_data(documented_function) -> Dict[str, Any]:
    return spec_data(
        [
            documented_function,
            export_data(
                "formatDate",
                description="Format a date.",
                tags=[tag("param", "{Date} input - The date"), tag("param", "{string} fmt - Format pattern")],
                signatures=[signature([param("date", {"$ref": "#/types/Date"}), param("format")], "string")],
            ),
            export_data("VERSION", kind="variable", schema="string"),
        ],
        [
            {
                "id": "Client",
                "name": "Client",
                "kind": "interface",
                "members": [{"name": "get", "kind": "method"}, {"name": "post", "kind": "method"}],
            }
        ],
    )


@pytest.fixture
def sample_spec(sample_spec_data) -> ApiSpec:
    return ApiSpec.model_validate(sample_spec_data)


@pytest.fixture
def pipe_overloads() -> List[Dict[str, Any]]:
    """Three overloads of ``pipe``: one documented, two bare."""
    return [
        export_data(
            "pipe-1",
            "pipe",
            description="Compose functions left to right.",
            signatures=[signature([param("a", "Function")], "Function")],
        ),
        export_data("pipe-2", "pipe", signatures=[signature([param("a", "Function"), param("b", "Function")], "Function")]),
        export_data(
            "pipe-3",
            "pipe",
            signatures=[signature([param("a", "Function"), param("b", "Function"), param("c", "Function")], "Function")],
        ),
    ]
