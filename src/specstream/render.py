"""
Renderer-agnostic tree expansion.

Walks a Spec from its root and produces a tree of ``RenderNode``s with
visibility applied, props resolved, two-way bindings collected and repeated
elements expanded once per item of their state array. A registry maps
element types to callables that turn a node (and its rendered children)
into whatever the host UI needs.

Usage:
    tree = expand_spec(spec, state)
    html = render_tree(tree, {"Card": render_card, "Text": render_text})
    await tree.children[0].emit("press", runner)
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from specstream.actions.models import parse_action_bindings
from specstream.actions.resolve import js_string, resolve_action
from specstream.actions.runner import ActionRunner
from specstream.core.pointer import get_by_path
from specstream.expressions.context import ResolutionContext
from specstream.expressions.resolver import resolve_bindings, resolve_element_props
from specstream.expressions.visibility import evaluate_visibility

logger = logging.getLogger(__name__)

Component = Callable[["RenderNode", list[Any]], Any]


@dataclass
class RenderNode:
    """
    One rendered element instance.

    Attributes:
        key: Element key in the Spec, or the repeat key for repeated children
        type: Component type
        props: Fully resolved props
        bindings: Prop name -> state path for two-way bound props
        on: Raw event bindings from the element
        children: Expanded child nodes
        ctx: Resolution context the node was expanded in
    """

    key: str
    type: str
    props: dict[str, Any] = field(default_factory=dict)
    bindings: dict[str, str] | None = None
    on: dict[str, Any] | None = None
    children: list[RenderNode] = field(default_factory=list)
    ctx: ResolutionContext = field(default_factory=ResolutionContext, repr=False)

    async def emit(self, event: str, runner: ActionRunner) -> None:
        """
        Fire an event: run every action bound to it, in order.

        Params are resolved in this node's scope, so ``$item`` becomes the
        item's state path and ``$index`` its position.
        """
        for binding in parse_action_bindings((self.on or {}).get(event)):
            await runner.execute(resolve_action(binding, runner.store.state, self.ctx))


def _expand_children(
    parent: dict[str, Any],
    child_keys: list[Any],
    spec: dict[str, Any],
    ctx: ResolutionContext,
    loading: bool,
    repeated: bool = False,
) -> list[RenderNode]:
    elements = spec.get("elements") or {}
    nodes: list[RenderNode] = []
    for child_key in child_keys:
        child = elements.get(child_key) if isinstance(child_key, str) else None
        if not isinstance(child, dict):
            if not loading:
                logger.warning(
                    'Missing element "%s" referenced as child of "%s"%s. This element will not render.',
                    child_key,
                    parent.get("type"),
                    " (repeat)" if repeated else "",
                )
            continue
        node = _expand_element(child_key, child, spec, ctx, loading)
        if node is not None:
            nodes.append(node)
    return nodes


def _repeat_key(repeat: dict[str, Any], item: Any, index: int) -> str:
    key_field = repeat.get("key")
    if key_field and isinstance(item, dict):
        value = item.get(key_field)
        return js_string(value) if value is not None else str(index)
    return str(index)


def _expand_element(
    key: str,
    element: dict[str, Any],
    spec: dict[str, Any],
    ctx: ResolutionContext,
    loading: bool,
) -> RenderNode | None:
    if "visible" in element and not evaluate_visibility(element["visible"], ctx):
        return None

    raw_props = element.get("props")
    node = RenderNode(
        key=key,
        type=str(element.get("type", "")),
        props=resolve_element_props(raw_props, ctx),
        bindings=resolve_bindings(raw_props, ctx),
        on=element.get("on"),
        ctx=ctx,
    )

    child_keys = element.get("children") or []
    repeat = element.get("repeat")
    if isinstance(repeat, dict) and isinstance(repeat.get("statePath"), str):
        state_path = repeat["statePath"]
        items = get_by_path(ctx.state_model, state_path)
        for index, item in enumerate(items if isinstance(items, list) else []):
            scope = ctx.for_item(item, index, f"{state_path}/{index}")
            group = RenderNode(key=_repeat_key(repeat, item, index), type="", ctx=scope)
            group.children = _expand_children(element, child_keys, spec, scope, loading, repeated=True)
            node.children.append(group)
    else:
        node.children = _expand_children(element, child_keys, spec, ctx, loading)

    return node


def expand_spec(spec: dict[str, Any] | None, state: Any = None, loading: bool = False) -> RenderNode | None:
    """
    Expand a Spec into a render tree.

    Args:
        spec: Flat Spec document
        state: State model (defaults to the Spec's own ``state``)
        loading: True while the Spec is still streaming; missing children
            are then expected and not warned about

    Returns:
        Root node, or None when there is no root or it is hidden.

    Repeated elements get one keyless group node (``type == ""``) per item,
    keyed by ``repeat.key`` or the index, holding that item's children.
    """
    root_key = spec.get("root") if spec else None
    if not isinstance(root_key, str) or not root_key:
        return None
    root = (spec.get("elements") or {}).get(root_key)
    if not isinstance(root, dict):
        return None
    if state is None:
        state = spec.get("state") or {}
    return _expand_element(root_key, root, spec, ResolutionContext(state_model=state), loading)


def render_tree(
    node: RenderNode,
    registry: Mapping[str, Component],
    fallback: Component | None = None,
) -> Any:
    """
    Render a node bottom-up through the registry.

    Group nodes from repeats render as the flat list of their children.
    Types without a component (and no fallback) render as None with a
    warning; a component that raises renders as None and the error is logged.
    """
    rendered_children: list[Any] = []
    for child in node.children:
        if child.type == "":
            rendered_children.extend(render_tree(grand, registry, fallback) for grand in child.children)
        else:
            rendered_children.append(render_tree(child, registry, fallback))

    component = registry.get(node.type, fallback)
    if component is None:
        logger.warning("No renderer for component type: %s", node.type)
        return None
    try:
        return component(node, rendered_children)
    except Exception:
        logger.exception("Rendering error in <%s>", node.type)
        return None
