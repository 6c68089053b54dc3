from .animation import AnimationData, AnimationExtrema
from .catalog import DirectionFileSpec, ExportCatalog
from .frames import Frame, StoryAggregate
from .nodes import DIRECTIONS, Direction, NodeRecord, Vec3

__all__ = [
    "AnimationData",
    "AnimationExtrema",
    "DirectionFileSpec",
    "ExportCatalog",
    "Frame",
    "StoryAggregate",
    "DIRECTIONS",
    "Direction",
    "NodeRecord",
    "Vec3",
]
