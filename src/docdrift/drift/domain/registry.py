"""
Export registry.

Name lookups used by the link and prose checks: every export, namespace
member and type name of one spec, plus which members each type has.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from docdrift.spec.domain.enums import ExportKind
from docdrift.spec.domain.models import ApiSpec

TYPE_KINDS = {"class", "interface", "type", "enum"}


@dataclass
class ExportInfo:
    name: str
    kind: str
    is_callable: bool = False


@dataclass
class ExportRegistry:
    package_name: str = ""
    exports: Dict[str, ExportInfo] = field(default_factory=dict)
    types: Set[str] = field(default_factory=set)
    all: Set[str] = field(default_factory=set)
    # parent type/export name -> member names
    members: Dict[str, Set[str]] = field(default_factory=dict)

    def has(self, name: str) -> bool:
        return name in self.all

    def members_of(self, parent: str) -> Optional[Set[str]]:
        """Known members of *parent*, or None when nothing is known about it."""
        return self.members.get(parent)

    def all_names(self) -> List[str]:
        return sorted(self.all)

    def callable_names(self) -> List[str]:
        return sorted(info.name for info in self.exports.values() if info.is_callable)

    def type_names(self) -> List[str]:
        names = set(self.types)
        names.update(info.name for info in self.exports.values() if info.kind in TYPE_KINDS)
        return sorted(names)


def _index_schema_properties(registry: ExportRegistry, parent: str, schema) -> None:
    if not isinstance(schema, dict):
        return
    properties = schema.get("properties")
    if isinstance(properties, dict) and properties:
        registry.members.setdefault(parent, set()).update(str(name) for name in properties)


def build_export_registry(spec: ApiSpec) -> ExportRegistry:
    """Index all export, namespace member and type names of *spec*."""
    registry = ExportRegistry(package_name=spec.meta.name)

    for export in spec.exports:
        info = ExportInfo(name=export.name, kind=export.kind.value, is_callable=export.kind.is_callable)
        registry.exports[export.name] = info
        registry.exports.setdefault(export.id, info)
        registry.all.update((export.name, export.id))

        if export.kind is ExportKind.NAMESPACE:
            for member in export.members:
                if not member.name:
                    continue
                kind = member.kind or "unknown"
                registry.exports.setdefault(
                    member.name,
                    ExportInfo(name=member.name, kind=kind, is_callable=kind in ("function", "class")),
                )
                registry.all.add(member.name)

        _index_schema_properties(registry, export.name, export.type_schema)
        member_names = export.member_names()
        if member_names:
            registry.members.setdefault(export.name, set()).update(member_names)

    for api_type in spec.types:
        registry.types.update((api_type.name, api_type.id))
        registry.all.update((api_type.name, api_type.id))
        _index_schema_properties(registry, api_type.name, api_type.type_schema)
        member_names = api_type.member_names()
        if member_names:
            registry.members.setdefault(api_type.name, set()).update(member_names)

    return registry
