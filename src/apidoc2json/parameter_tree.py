"""Enumerate the call shapes implied by optional parameter notation.

Parameters are declared in a heading like ``something([sources[, options,
flag[, abc]]])``. Each bracket opens an optional group, so that declaration
allows four call shapes::

    something()
    something(sources)
    something(sources, options, flag)
    something(sources, options, flag, abc)

A :class:`ParameterTree` holds one node per bracket group. Every parameter is
stamped from a counter shared by the whole tree, so flattened overloads keep
the documented order even when groups interleave (``[min, ]max[, callback]``).
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from apidoc2json.exceptions import ParseError


@dataclass
class CreationCounter:
    """Monotonic counter shared by every node of one tree."""

    count: int = 0

    def next(self) -> int:
        value = self.count
        self.count += 1
        return value


@dataclass(frozen=True)
class TreeParameter:
    name: str
    created_at: int


class ParameterTree:
    """One optional group of parameters and its nested groups."""

    def __init__(
        self,
        counter: CreationCounter | None = None,
        parent: ParameterTree | None = None,
    ) -> None:
        self._counter = counter if counter is not None else CreationCounter()
        self._parent = parent
        self._parameters: list[TreeParameter] = []
        self._children: list[ParameterTree] = []

    @property
    def parent(self) -> ParameterTree | None:
        return self._parent

    @property
    def parameters(self) -> list[TreeParameter]:
        return list(self._parameters)

    @property
    def children(self) -> list[ParameterTree]:
        return list(self._children)

    def add_parameter(self, name: str) -> None:
        self._parameters.append(TreeParameter(name, self._counter.next()))

    def create_sub_tree(self) -> ParameterTree:
        tree = ParameterTree(self._counter, self)
        self._children.append(tree)
        return tree

    def coalesce_parameters(
        self, include_first_children: bool = False
    ) -> list[list[TreeParameter]]:
        """Return every overload as a list of parameters, in structural order.

        The group's own parameters alone always form an overload; each child
        group contributes its overloads prefixed with this group's parameters.
        With ``include_first_children``, one more overload holds this group's
        parameters together with those of every direct child group.
        """
        coalesced = [list(self._parameters)]
        for child in self._children:
            for overload in child.coalesce_parameters():
                coalesced.append([*self._parameters, *overload])

        if include_first_children:
            first_children = list(self._parameters)
            for child in self._children:
                first_children.extend(
                    parameter
                    for parameter in child._parameters
                    if parameter not in first_children
                )
            coalesced.append(first_children)

        return coalesced

    def coalesce(self, include_first_children: bool = False) -> list[list[str]]:
        """Return the unique overloads as parameter names in creation order."""
        seen: set[tuple[str, ...]] = set()
        overloads: list[list[str]] = []
        for overload in self.coalesce_parameters(include_first_children):
            names = tuple(
                parameter.name
                for parameter in sorted(overload, key=lambda parameter: parameter.created_at)
            )
            if names in seen:
                continue
            seen.add(names)
            overloads.append(list(names))
        return overloads


def create_parameter_tree(parameter_names: Sequence[str]) -> tuple[ParameterTree, bool]:
    """Build a tree from comma-split tokens such as ``["[sources[", " options]]"]``.

    Token shapes handled:

    - ``length]]``: add ``length``, then close two groups
    - ``arrayBuffer[``: add ``arrayBuffer``, then open a group
    - ``[hello]``: open a group, add ``hello``, close it
    - ``]max[``: close a group, add ``max``, open another one; this also asks
      for the "all first children" overload

    Returns:
        The root of the tree and whether the "all first children" overload
        should be included.

    Raises:
        ParseError: If brackets close a group that was never opened, or leave
            a group open at the end.
    """
    tree = ParameterTree()
    include_first_children = False

    for raw in parameter_names:
        parameter = raw.strip()

        name_start = 0
        if parameter.startswith("["):
            tree = tree.create_sub_tree()
            name_start = 1
        elif parameter.startswith("]"):
            tree = _parent_of(tree)
            name_start = 1

        if not include_first_children:
            include_first_children = parameter.startswith("]") and parameter.endswith("[")

        name_end = len(parameter) - 1 if parameter.endswith("[") else len(parameter)
        closed_groups = 0
        while name_end > name_start and parameter[name_end - 1] == "]":
            name_end -= 1
            closed_groups += 1

        name = parameter[name_start:name_end].strip()
        if name:
            tree.add_parameter(name)

        for _ in range(closed_groups):
            tree = _parent_of(tree)

        if parameter.endswith("[") and len(parameter) > name_start:
            tree = tree.create_sub_tree()

    if tree.parent is not None:
        raise ParseError("unclosed optional parameter group")

    return tree, include_first_children


def create_parameter_groupings(parameter_names: Sequence[str]) -> list[list[str]]:
    """Return every valid call shape for the given comma-split tokens."""
    tree, include_first_children = create_parameter_tree(parameter_names)
    return tree.coalesce(include_first_children)


def _parent_of(tree: ParameterTree) -> ParameterTree:
    if tree.parent is None:
        raise ParseError("closing bracket without a matching optional group")
    return tree.parent
