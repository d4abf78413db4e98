"""Default toolpath settings.

All lengths are inches.  Feed rates are in output units per minute.
"""

# How far the tool lifts above the cutting height between cuts.
Z_CLEARANCE = 0.1
Z_CUTTING_HEIGHT = 0.0

ABSOLUTE_X_START = 0.0
ABSOLUTE_Y_START = 0.0

PLUNGE_FEEDRATE = 2.0
MILLING_FEEDRATE = 2.0

OUTPUT_ABSOLUTE = False
OUTPUT_METRIC = False

MODE = "voronoi"
