"""Route classification by parameter shape."""

from collections.abc import Sequence

from sprig.routing.route import ParameterDescriptor, ParamKind, RouteType


def classify(parameters: Sequence[ParameterDescriptor]) -> RouteType:
    """Derive a route's type from its parameter descriptors.

    A catch-all dominates: any spread parameter makes the route
    ``VARIABLE_SEGMENTS`` no matter how many single parameters precede it.
    """
    if not parameters:
        return RouteType.SIMPLE
    if any(p.kind is ParamKind.SPREAD for p in parameters):
        return RouteType.VARIABLE_SEGMENTS
    if len(parameters) == 1:
        return RouteType.SINGLE_PARAM
    return RouteType.NESTED
