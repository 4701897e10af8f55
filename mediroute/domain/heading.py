import math
from mediroute.domain.models import RouteDirection

def classify_heading(heading_degrees: float) -> RouteDirection:
    """
    Map a compass heading to the coarse direction of travel.

    Quadrants are centered on the cardinal points. Each boundary belongs to
    the quadrant clockwise of it, so 45 -> W_E, 135 -> N_S, 225 -> E_W and
    315 -> S_N.
    """
    if heading_degrees is None or not math.isfinite(heading_degrees):
        heading_degrees = 0.0
    heading = heading_degrees % 360.0

    if heading >= 315.0 or heading < 45.0:
        return RouteDirection.S_N  # north-bound
    if heading < 135.0:
        return RouteDirection.W_E  # east-bound
    if heading < 225.0:
        return RouteDirection.N_S  # south-bound
    return RouteDirection.E_W  # west-bound
