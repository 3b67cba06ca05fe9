"""Managed resource definitions as seen by the resilience layer.

The schema system that describes a resource's fields is out of scope; all
Stratus needs from a resource definition is its lifecycle function slots.
The engine passes two arguments to every lifecycle function: the resource
data (opaque here) and ``meta``, the configured API client context.

Slot signatures:

=============  ===================================  ====================
Slot           Signature                            Returns
=============  ===================================  ====================
create         ``fn(data, meta)``                   None
read           ``fn(data, meta)``                   None
update         ``fn(data, meta)``                   None
delete         ``fn(data, meta)``                   None
exists         ``fn(data, meta)``                   bool
importer.state ``fn(data, meta)``                   list of resource data
=============  ===================================  ====================

Failures are raised, never returned.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

CrudFunc = Callable[[Any, Any], None]
ExistsFunc = Callable[[Any, Any], bool]
StateFunc = Callable[[Any, Any], list[Any]]


@dataclass
class ResourceImporter:
    """Import support for a resource.

    Attributes:
        state: Turns an import id held in ``data`` into resource data.
    """

    state: StateFunc | None = None


@dataclass
class Resource:
    """Lifecycle slots of one managed resource type.

    Any slot may be None when the resource does not support it.
    """

    create: CrudFunc | None = None
    read: CrudFunc | None = None
    update: CrudFunc | None = None
    delete: CrudFunc | None = None
    exists: ExistsFunc | None = None
    importer: ResourceImporter | None = None


__all__ = [
    "CrudFunc",
    "ExistsFunc",
    "Resource",
    "ResourceImporter",
    "StateFunc",
]
