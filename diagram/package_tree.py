from __future__ import annotations

from typing import List, Optional

from diagram.model import Diagram, PackageObject


def common_prefix(paths: List[List[str]]) -> List[str]:
    """Longest common leading run of package segments; empty for no paths."""
    prefix: Optional[List[str]] = None
    for path in paths:
        if prefix is None:
            prefix = list(path)
            continue
        count = 0
        while count < len(prefix) and count < len(path) and path[count] == prefix[count]:
            count += 1
        prefix = prefix[:count]
    return prefix or []


def build_package_tree(diagram: Diagram) -> PackageObject:
    """
    Group all diagram objects by package below their common prefix.
    Intermediate PackageObject nodes are created on demand.
    """
    prefix = common_prefix([obj.package for obj in diagram.objects.values()])
    root = PackageObject(".".join(prefix), prefix)
    for obj in diagram.objects.values():
        root.insert(obj.package[len(prefix):], obj)
    return root
