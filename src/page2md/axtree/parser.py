"""Build an AXNode tree from a Chrome DevTools accessibility dump."""

from __future__ import annotations

import logging
import re
from typing import Any, Optional, Union

from .nodes import AXNode, Role

logger = logging.getLogger(__name__)

# Chrome reports a few roles as numeric internal ids instead of names.
INTERNAL_ROLES = {
    158: "StaticText",
    101: "InlineTextBox",
}

ROOT_ROLE_NAMES = ("RootWebArea", "WebArea")

_ORDERED_MARKER = re.compile(r"^(\d+|[a-zA-Z]|[ivxlcdmIVXLCDM]+)[.)]$")


def _role_name(raw: dict[str, Any]) -> str:
    """Resolve the role string of a CDP node, mapping internal role ids."""
    role = raw.get("role") or {}
    value = role.get("value") if isinstance(role, dict) else role

    if isinstance(value, int):
        chrome_role = raw.get("chromeRole") or {}
        value = chrome_role.get("value", value) if isinstance(chrome_role, dict) else value
        if isinstance(value, int):
            return INTERNAL_ROLES.get(value, f"internal:{value}")
    return str(value) if value else ""


def _wrapped_value(obj: Any) -> Any:
    """Unwrap CDP {"type": ..., "value": ...} objects."""
    if isinstance(obj, dict):
        return obj.get("value")
    return obj


def _properties(raw: dict[str, Any]) -> dict[str, Any]:
    props: dict[str, Any] = {}
    for prop in raw.get("properties") or []:
        if isinstance(prop, dict) and "name" in prop:
            props[prop["name"]] = _wrapped_value(prop.get("value"))
    return props


def _is_ignored(raw: dict[str, Any]) -> bool:
    if raw.get("ignored"):
        return True
    reasons = raw.get("ignoredReasons") or []
    return any(isinstance(r, dict) and r.get("name") == "uninteresting" for r in reasons)


def _to_level(value: Any) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _make_node(raw: dict[str, Any]) -> AXNode:
    """Convert one CDP node dict into an AXNode without children."""
    raw_role = _role_name(raw)
    role = Role.parse(raw_role)
    props = _properties(raw)
    name = _wrapped_value(raw.get("name")) or ""

    value: Optional[str] = None
    if role is Role.LINK:
        value = props.get("url") or None
    elif role is Role.IMAGE:
        value = props.get("alt") or name or None

    return AXNode(
        role=role,
        raw_role=raw_role,
        name=str(name),
        value=value,
        level=_to_level(props.get("level")) if role is Role.HEADING else None,
        ignored=_is_ignored(raw),
        node_id=str(raw["nodeId"]) if "nodeId" in raw else None,
    )


def _find_root_id(nodes: list[dict[str, Any]]) -> Optional[str]:
    for raw in nodes:
        if _role_name(raw) in ROOT_ROLE_NAMES:
            return str(raw["nodeId"])
    for raw in nodes:
        if not raw.get("parentId"):
            return str(raw["nodeId"])
    return str(nodes[0]["nodeId"]) if nodes else None


def _infer_ordered(node: AXNode) -> bool:
    """A list is ordered when its first item's marker looks like "1." or "a)"."""
    for item in node.children:
        if item.role is not Role.LIST_ITEM:
            continue
        for child in item.children:
            if child.role is Role.LIST_MARKER:
                return bool(_ORDERED_MARKER.match(child.name.strip()))
        return False
    return False


def parse_cdp_tree(payload: Union[dict[str, Any], list[dict[str, Any]]]) -> AXNode:
    """
    Build a tree from the result of ``Accessibility.getFullAXTree``.

    The payload is the flat node list (or a dict holding it under
    ``"nodes"``) linked by ``childIds``. Unknown child ids are dropped and
    a node is attached at most once, so the result is always a tree.
    An empty payload yields an empty root node.

    Args:
        payload: CDP response dict or its node list

    Returns:
        Root AXNode (the RootWebArea when present)
    """
    nodes = payload.get("nodes", []) if isinstance(payload, dict) else list(payload)
    nodes = [n for n in nodes if isinstance(n, dict) and "nodeId" in n]

    root_id = _find_root_id(nodes)
    if root_id is None:
        return AXNode(role=Role.ROOT, raw_role="RootWebArea")

    by_id = {str(n["nodeId"]): n for n in nodes}
    built: dict[str, AXNode] = {node_id: _make_node(raw) for node_id, raw in by_id.items()}

    attached = {root_id}
    stack = [root_id]
    dropped = 0
    while stack:
        node_id = stack.pop()
        parent = built[node_id]
        for child_id in by_id[node_id].get("childIds") or []:
            child_id = str(child_id)
            if child_id not in built or child_id in attached:
                dropped += 1
                continue
            attached.add(child_id)
            parent.children.append(built[child_id])
            stack.append(child_id)

    if dropped:
        logger.debug(f"Dropped {dropped} dangling or repeated child references")

    for node in built[root_id].walk():
        if node.role is Role.LIST:
            node.ordered = _infer_ordered(node)

    logger.debug(f"Parsed accessibility tree: {len(attached)} of {len(nodes)} nodes reachable")
    return built[root_id]
