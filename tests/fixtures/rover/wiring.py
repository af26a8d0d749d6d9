from sequencer import (
    AggregateRepository,
    ApplyTransition,
    CreateAggregate,
    Dispatcher,
    DispatcherBuilder,
    DispatcherSettings,
    FlagStore,
    RecordStore,
)

from .geometry import Coordinate
from .messages import (
    MoveForward,
    RoverCommand,
    RoverEvent,
    StartRover,
    TurnLeft,
    TurnOffRover,
    TurnRight,
)
from .processors import ObstacleProjection, PathProjection, ShutdownOnObstacle
from .rover import Rover, drive, start_rover


def build_rover_dispatcher(
    repository: AggregateRepository[Rover],
    path: RecordStore[str],
    obstacles: FlagStore[Coordinate],
    settings: DispatcherSettings | None = None,
) -> Dispatcher:
    """Wire the rover domain into a dispatcher."""
    steer = ApplyTransition(repository, drive)
    builder = (
        DispatcherBuilder(RoverCommand, RoverEvent)
        .register_handler(StartRover, CreateAggregate(repository, start_rover))
        .register_handler(TurnLeft, steer)
        .register_handler(TurnRight, steer)
        .register_handler(MoveForward, steer)
        .register_handler(TurnOffRover, steer)
        .register_policies(ShutdownOnObstacle())
        .register_projections(PathProjection(repository, path))
        .register_projections(ObstacleProjection(obstacles))
    )
    if settings is not None:
        builder.with_settings(settings)
    return builder.build()
