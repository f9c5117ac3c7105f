"""Translation seams: how a descriptor becomes, or changes, a package."""

from __future__ import annotations

import copy
import functools
from typing import Any, Callable, Dict, List, Optional, Tuple, Type, TypeVar

from remotestack.core.domain.application import (
    KubernetesApplication,
    KubernetesApplicationResourceTemplate,
)
from remotestack.core.domain.descriptors import Descriptor, Trait, Workload
from remotestack.exceptions import WrongDescriptorVariantError

# A Packager appends the fragments for one workload to a copy of the aggregate.
Packager = Callable[[KubernetesApplication, Workload], KubernetesApplication]

# A Modifier patches the aggregate on behalf of one trait.
Modifier = Callable[[KubernetesApplication, Trait], KubernetesApplication]

F = TypeVar("F", bound=Callable[..., KubernetesApplication])

# Fields a trait may own on a packaged fragment, by fragment kind.
TRAIT_OWNED_FIELDS: Dict[str, Tuple[Tuple[str, ...], ...]] = {
    "Deployment": (("spec", "replicas"),),
}


def _accepts(kind: Type[Descriptor], noun: str) -> Callable[[F], F]:
    def decorator(fn: F) -> F:
        @functools.wraps(fn)
        def wrapper(app: KubernetesApplication, descriptor: Descriptor) -> KubernetesApplication:
            if not isinstance(descriptor, kind):
                raise WrongDescriptorVariantError(
                    f"{noun} is not a {kind.__name__}: got {type(descriptor).__name__}"
                )
            return fn(app, descriptor)

        wrapper.descriptor_type = kind  # type: ignore[attr-defined]
        return wrapper  # type: ignore[return-value]

    return decorator


def packager_for(kind: Type[Workload]) -> Callable[[F], F]:
    """
    Bind a packager to the workload type it translates.

    The bound type is checked against the reconciler's kind at construction,
    and against each descriptor at call time.
    """
    return _accepts(kind, "object")


def modifier_for(kind: Type[Trait]) -> Callable[[F], F]:
    """Bind a modifier to the trait type it applies."""
    return _accepts(kind, "trait")


def descriptor_type_of(fn: Callable[..., KubernetesApplication], default: Type[Descriptor]) -> Type[Descriptor]:
    return getattr(fn, "descriptor_type", default)


@packager_for(Workload)
def generic_packager(app: KubernetesApplication, workload: Workload) -> KubernetesApplication:
    """Package the workload document itself, unchanged, as one fragment."""
    packaged = app.model_copy(deep=True)
    packaged.spec.resource_templates.append(
        KubernetesApplicationResourceTemplate.wrap(workload.to_document())
    )
    return packaged


@modifier_for(Trait)
def noop_modifier(app: KubernetesApplication, trait: Trait) -> KubernetesApplication:
    return app


def fragment_identity(template: Dict[str, Any]) -> Tuple[str, str]:
    """A fragment is identified by its kind and metadata.name."""
    metadata = template.get("metadata") or {}
    return str(template.get("kind") or ""), str(metadata.get("name") or "")


def _lookup(document: Dict[str, Any], path: Tuple[str, ...]) -> Optional[Any]:
    node: Any = document
    for part in path:
        if not isinstance(node, dict) or part not in node:
            return None
        node = node[part]
    return node


def _carry(source: Dict[str, Any], target: Dict[str, Any], path: Tuple[str, ...]) -> None:
    value = _lookup(source, path)
    if value is None or _lookup(target, path) is not None:
        return
    node = target
    for part in path[:-1]:
        child = node.get(part)
        if not isinstance(child, dict):
            child = node[part] = {}
        node = child
    node[path[-1]] = copy.deepcopy(value)


def merge_fragment(
    templates: List[KubernetesApplicationResourceTemplate],
    fragment: KubernetesApplicationResourceTemplate,
) -> None:
    """
    Put ``fragment`` into ``templates`` in place.

    A fragment with the same identity is replaced at its index, keeping the
    fields traits own on it; otherwise the fragment is appended. Every other
    fragment keeps its position.
    """
    identity = fragment_identity(fragment.spec.template)
    for i, existing in enumerate(templates):
        if fragment_identity(existing.spec.template) != identity:
            continue
        merged = fragment.model_copy(deep=True)
        for path in TRAIT_OWNED_FIELDS.get(identity[0], ()):
            _carry(existing.spec.template, merged.spec.template, path)
        templates[i] = merged
        return
    templates.append(fragment.model_copy(deep=True))
