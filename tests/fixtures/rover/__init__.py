"""Rover simulation used to exercise the dispatcher end to end."""

from .geometry import Coordinate, Direction, Grid
from .messages import (
    MoveForward,
    ObstacleDetected,
    RoverCommand,
    RoverEvent,
    RoverMoved,
    RoverStarted,
    RoverTurned,
    RoverTurnedOff,
    StartRover,
    TurnLeft,
    TurnOffRover,
    TurnRight,
)
from .processors import ObstacleProjection, PathProjection, ShutdownOnObstacle
from .rover import Rover, RoverStatus, drive, start_rover
from .wiring import build_rover_dispatcher

__all__ = [
    "Coordinate",
    "Direction",
    "Grid",
    "Rover",
    "RoverStatus",
    "drive",
    "start_rover",
    "StartRover",
    "TurnLeft",
    "TurnRight",
    "MoveForward",
    "TurnOffRover",
    "RoverCommand",
    "RoverStarted",
    "RoverTurned",
    "RoverMoved",
    "ObstacleDetected",
    "RoverTurnedOff",
    "RoverEvent",
    "ShutdownOnObstacle",
    "PathProjection",
    "ObstacleProjection",
    "build_rover_dispatcher",
]
