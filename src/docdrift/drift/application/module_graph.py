"""
Cross-package symbol lookup.

When several packages are analyzed together, a ``{@link}`` or import in one
package may legitimately point at another. The graph records which module
exports each symbol; the first module to export a name wins.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional, Set

from docdrift.spec.domain.enums import ExportKind
from docdrift.spec.domain.models import ApiSpec


@dataclass
class ModuleInfo:
    name: str
    exports: Set[str] = field(default_factory=set)
    types: Set[str] = field(default_factory=set)


@dataclass
class ModuleGraph:
    modules: Dict[str, ModuleInfo] = field(default_factory=dict)
    exports: Dict[str, str] = field(default_factory=dict)
    types: Dict[str, str] = field(default_factory=dict)
    all: Set[str] = field(default_factory=set)

    def has(self, symbol: str) -> bool:
        return symbol in self.all

    def find_symbol_module(self, symbol: str) -> Optional[str]:
        return self.exports.get(symbol) or self.types.get(symbol)


def build_module_graph(specs: Iterable[ApiSpec]) -> ModuleGraph:
    graph = ModuleGraph()

    for spec in specs:
        module = graph.modules.setdefault(spec.meta.name, ModuleInfo(name=spec.meta.name))

        for export in spec.exports:
            names = [export.name, export.id]
            if export.kind is ExportKind.NAMESPACE:
                names.extend(m.name for m in export.members if m.name)
            for name in names:
                module.exports.add(name)
                graph.all.add(name)
                graph.exports.setdefault(name, module.name)

        for api_type in spec.types:
            for name in (api_type.name, api_type.id):
                module.types.add(name)
                graph.all.add(name)
                graph.types.setdefault(name, module.name)

    return graph
