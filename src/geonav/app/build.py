# geonav/app/build.py
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from geonav.app.protocols import PositionSource
from geonav.app.session import NavigationSession
from geonav.app.wiring import wire
from geonav.config.models import InstructionModel, ScenarioModel
from geonav.domain.entities.features import FeatureCollection, RawCollection
from geonav.domain.entities.geography import GraphBuildResult, LocalPoint
from geonav.domain.entities.route import NavigationInstruction, TurnDirection
from geonav.domain.graph_builder import GraphBuilder
from geonav.domain.projection import Projector
from geonav.domain.tracker import RouteTracker
from geonav.io.geojson import load_sources
from geonav.io.kernel_logging import KernelLogging
from geonav.io.recorder import JsonlSink, Recorder
from geonav.runtime.registries import make_position_source
from geonav.sim.clock import SimClock
from geonav.sim.hooks import NoopHooks
from geonav.sim.kernel import Kernel
from geonav.sim.rng import RNGRegistry


@dataclass
class App:
    kernel: Kernel
    clock: SimClock
    rng: RNGRegistry
    projector: Projector
    graph: GraphBuildResult
    tracker: RouteTracker
    session: NavigationSession
    duration: float

    def run(self, until: float | None = None) -> int:
        return self.kernel.run(until=self.duration if until is None else until)


def to_instruction(m: InstructionModel) -> NavigationInstruction:
    x, z = m.position
    return NavigationInstruction(LocalPoint(x, z), TurnDirection(m.direction), m.text)


def build(
    cfg: ScenarioModel | Mapping,
    *,
    collections: Iterable[FeatureCollection | RawCollection | Mapping] | None = None,
    source: PositionSource | None = None,
    use_logging: bool = True,
    recorder: Recorder | None = None,
) -> App:
    # 0) Validate config
    model = cfg if isinstance(cfg, ScenarioModel) else ScenarioModel.model_validate(cfg)

    # 1) Clock & RNG
    clock = SimClock.utc_epoch(*model.sim.epoch)
    rng_registry = RNGRegistry(model.sim.seed, scenario=model.name)

    # 2) Kernel (with hooks)
    hooks = (
        KernelLogging(
            run_id=model.run_id,
            recorder=recorder or Recorder(JsonlSink()),
            clock=clock,
            level=model.log.level,
            debug=model.log.debug,
            sample_every=model.log.sample_every,
        )
        if use_logging
        else NoopHooks()
    )
    kernel = Kernel(hooks=hooks)

    # 3) Projection & graph (built once, read-only afterwards)
    projector = Projector.from_config(model.projection)
    builder = GraphBuilder.from_config(model.graph, projector)
    raw = list(collections) if collections is not None else load_sources(model.graph.sources)
    graph = builder.ingest(raw)

    # 4) Route tracking
    instructions = [to_instruction(m) for m in model.route]
    tracker = RouteTracker.from_config(model.tracker, instructions)

    if source is None:
        source = make_position_source(
            model.position_source,
            deps={
                "projector": projector,
                "route": [i.position for i in instructions],
                "rng": rng_registry.stream("sensor_noise"),
            },
        )
    session = NavigationSession(
        tracker=tracker,
        source=source,
        projector=projector,
        tick_s=model.sim.tick_s,
        stop_at_goal=model.tracker.stop_at_goal,
    )

    # 5) Wiring & seed the first tick
    wire(kernel, session=session)
    for ev in session.start(0.0):
        kernel.schedule(ev)

    return App(
        kernel, clock, rng_registry, projector, graph, tracker, session, float(model.sim.duration)
    )
