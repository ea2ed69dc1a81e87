"""``dependency_graph`` plugin: the import graph of registered components.

Edges come from :class:`PendingImport` declarations on the registered
component classes.
"""

from typing import Dict, List, Optional, Tuple

from ..constants import IMPORTS_ATTR


def _build_graph(registry) -> Dict[str, Tuple[str, ...]]:
    graph: Dict[str, Tuple[str, ...]] = {}
    for key, entry in registry.items():
        cls = entry.concrete_class
        graph[key] = tuple(getattr(cls, IMPORTS_ATTR, ())) if cls is not None else ()
    return graph


def render_dot(graph: Dict[str, Tuple[str, ...]], *, rankdir: str = "LR", title: Optional[str] = None) -> str:
    lines: List[str] = []
    lines.append("digraph Drydock {")
    lines.append(f'  rankdir="{rankdir}";')
    lines.append("  node [shape=box, fontsize=10];")
    if title:
        lines.append('  labelloc="t";')
        lines.append(f'  label="{title}";')

    nodes = list(graph)
    for deps in graph.values():
        nodes.extend(d for d in deps if d not in graph)
    ids = {k: f"n{i}" for i, k in enumerate(dict.fromkeys(nodes))}

    for key, nid in ids.items():
        lines.append(f'  {nid} [label="{key}"];')

    for parent, deps in graph.items():
        for child in deps:
            lines.append(f"  {ids[parent]} -> {ids[child]};")

    lines.append("}")
    return "\n".join(lines)


class DependencyGraph:
    def dependency_graph(self) -> Dict[str, Tuple[str, ...]]:
        return _build_graph(self._registry)

    def export_graph(self, path: str, *, rankdir: str = "LR", title: Optional[str] = None) -> None:
        with open(path, "w", encoding="utf-8") as f:
            f.write(render_dot(self.dependency_graph(), rankdir=rankdir, title=title))
