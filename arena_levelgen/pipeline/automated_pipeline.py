"""
Automated Pipeline for arena level generation.

Orchestrates room layout planning, archetype assignment, height-field and
staircase generation, encounter construction and layout validation. One
``random.Random`` seeded per build is threaded through every stage, so a
fixed seed and fixed settings always produce the same layout.
"""

import time
import logging
import random
from dataclasses import dataclass, field, replace, fields
from enum import Enum
from pathlib import Path
from typing import Dict, Any, Optional, Callable, List

from ..generators.layout.layout_types import ArenaGrid, RoomLayout, MIN_GRID_SIZE
from ..generators.layout.corridors import CorridorCarver
from ..generators.layout.room_layout import RoomLayoutPlanner
from ..generators.archetypes.archetype_planner import ArchetypePlanner, RoomArchetype, count_archetypes
from ..generators.heightfield.height_field import HeightFieldGenerator, HeightFieldResult
from ..encounters.encounter_builder import EncounterBuilder, EncounterDefinition
from ..validation import validate_layout, ValidationResult
from ..conversion.spawn_placement import PlayerSpawnPlacer
from .layout_state import ArenaLayout

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class PipelineStage(Enum):
    INITIALIZE = "initialize"
    PLAN_ROOMS = "plan_rooms"
    ASSIGN_ARCHETYPES = "assign_archetypes"
    BUILD_HEIGHT_FIELD = "build_height_field"
    BUILD_ENCOUNTERS = "build_encounters"
    VALIDATE = "validate"
    COMPLETE = "complete"


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class PipelineError(Exception):
    pass


# ---------------------------------------------------------------------------
# Settings / Result dataclasses
# ---------------------------------------------------------------------------

@dataclass
class PipelineSettings:
    # Grid
    grid_width: int = 96
    grid_depth: int = 96
    cell_size: float = 4.0

    # Seeding for reproducible generation
    seed: Optional[int] = 12345  # None = random seed
    use_random_seed: bool = False

    # Room layout
    desired_room_count: int = 14
    min_room_size: int = 8
    max_room_size: int = 26
    corridor_width: int = 1
    spawn_clear_radius: int = 5
    long_corridor_chance: float = 0.65
    large_room_bias: float = 0.72

    # Height field
    wall_height: float = 18.0
    platform_level_height: float = 1.5
    max_platform_tiers: int = 4
    platform_footprint_min: float = 0.6
    platform_footprint_max: float = 0.9

    # Staircases / stacked floors
    staircase_count: int = 4
    stacked_floor_count: int = 2
    max_floors: int = 6

    # Encounters
    spawn_enemies: bool = True
    min_enemies_per_room: int = 2
    max_enemies_per_room: int = 5
    barrier_thickness: float = 0.45
    lock_on_enter: bool = True

    # Player spawn
    auto_position_player: bool = True
    fallback_player_spawn_height: float = 1.0
    max_spawn_attempts: int = 180

    # Debug output
    output_dir: Optional[str] = None
    map_name: str = "arena"
    enable_graph_dump: bool = False
    graph_dump_format: str = "dot"  # "dot" or "json"

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass
class PipelineResult:
    success: bool
    layout: Optional[ArenaLayout] = None
    validation: Optional[ValidationResult] = None
    output_files: List[str] = field(default_factory=list)
    stages_completed: List[PipelineStage] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    metrics: Dict[str, Any] = field(default_factory=dict)

    @property
    def total_time(self) -> float:
        return self.metrics.get("total_time", 0.0)

    @property
    def seed(self) -> Optional[int]:
        return self.metrics.get("seed")

    def add_error(self, error: str, stage: Optional[PipelineStage] = None):
        if stage:
            error = f"[{stage.value}] {error}"
        self.errors.append(error)

    def add_warning(self, warning: str, stage: Optional[PipelineStage] = None):
        if stage:
            warning = f"[{stage.value}] {warning}"
        self.warnings.append(warning)


# ---------------------------------------------------------------------------
# Settings clamping
# ---------------------------------------------------------------------------

def clamp_settings(settings: PipelineSettings) -> PipelineSettings:
    """
    Return a copy with every field forced into its supported range.

    Malformed values are never rejected; each adjustment is logged at DEBUG.
    """
    values = settings.to_dict()

    def adjust(name: str, new_value):
        if values[name] != new_value:
            logger.debug("Setting %s=%r out of range, using %r", name, values[name], new_value)
            values[name] = new_value

    def clamp(name: str, low, high):
        adjust(name, max(low, min(high, values[name])))

    adjust('grid_width', max(MIN_GRID_SIZE, values['grid_width']))
    adjust('grid_depth', max(MIN_GRID_SIZE, values['grid_depth']))
    if values['cell_size'] <= 0:
        adjust('cell_size', 4.0)

    clamp('desired_room_count', 6, 36)
    clamp('max_room_size', 5, 32)
    # Rooms must leave room for the border and a placement range
    clamp('max_room_size', 5, min(values['grid_width'], values['grid_depth']) - 6)
    clamp('min_room_size', 4, min(20, values['max_room_size']))
    clamp('corridor_width', 1, 4)
    adjust('spawn_clear_radius', max(1, values['spawn_clear_radius']))
    clamp('long_corridor_chance', 0.0, 1.0)
    clamp('large_room_bias', 0.0, 1.0)

    if values['wall_height'] <= 0:
        adjust('wall_height', 18.0)
    adjust('platform_level_height', max(0.0, values['platform_level_height']))
    clamp('max_platform_tiers', 2, 8)
    clamp('platform_footprint_min', 0.05, 1.0)
    clamp('platform_footprint_max', values['platform_footprint_min'], 1.0)

    adjust('staircase_count', max(0, values['staircase_count']))
    clamp('max_floors', 2, 8)
    clamp('stacked_floor_count', 1, values['max_floors'])

    adjust('min_enemies_per_room', max(1, values['min_enemies_per_room']))
    adjust('max_enemies_per_room', max(values['min_enemies_per_room'], values['max_enemies_per_room']))
    adjust('barrier_thickness', max(0.01, values['barrier_thickness']))
    adjust('max_spawn_attempts', max(1, values['max_spawn_attempts']))

    if values['graph_dump_format'] not in ("dot", "json"):
        adjust('graph_dump_format', "dot")

    return replace(settings, **values)


def resolve_seed(settings: PipelineSettings) -> int:
    """Configured seed, or a fresh one when random seeding is requested"""
    if settings.use_random_seed or settings.seed is None:
        return random.SystemRandom().randrange(2**31 - 1)
    return settings.seed


# ---------------------------------------------------------------------------
# Main pipeline
# ---------------------------------------------------------------------------

class ArenaPipeline:
    """Builds an ArenaLayout from PipelineSettings."""

    def __init__(self, settings: Optional[PipelineSettings] = None):
        self.settings = clamp_settings(settings or PipelineSettings())
        self.is_running = False
        self.current_stage = PipelineStage.INITIALIZE
        self.progress_callback: Optional[Callable[[PipelineStage, str], None]] = None

        # Per-build state
        self.rng: Optional[random.Random] = None
        self.grid: Optional[ArenaGrid] = None
        self.room_layout: Optional[RoomLayout] = None
        self.archetypes: Dict[int, RoomArchetype] = {}
        self.height_field: Optional[HeightFieldResult] = None
        self.encounters: List[EncounterDefinition] = []
        self.layout: Optional[ArenaLayout] = None

    # -- helpers --

    def set_progress_callback(self, callback: Callable[[PipelineStage, str], None]):
        self.progress_callback = callback

    def _update_progress(self, message: str):
        if self.progress_callback:
            try:
                self.progress_callback(self.current_stage, message)
            except Exception:
                logger.debug("Progress callback failed", exc_info=True)

    def _enter_stage(self, stage: PipelineStage, message: str):
        self.current_stage = stage
        self._update_progress(message)

    # -- stages --

    def _initialize(self):
        self._enter_stage(PipelineStage.INITIALIZE, "Initializing grid...")
        s = self.settings
        self.grid = ArenaGrid(s.grid_width, s.grid_depth, s.cell_size)
        self.room_layout = None
        self.archetypes = {}
        self.height_field = None
        self.encounters = []
        self.layout = None

    def _plan_rooms(self):
        self._enter_stage(PipelineStage.PLAN_ROOMS, "Planning rooms...")
        s = self.settings
        carver = CorridorCarver(self.rng, s.long_corridor_chance)
        planner = RoomLayoutPlanner(
            self.rng, carver,
            desired_room_count=s.desired_room_count,
            min_room_size=s.min_room_size,
            max_room_size=s.max_room_size,
            corridor_width=s.corridor_width,
            spawn_clear_radius=s.spawn_clear_radius,
            large_room_bias=s.large_room_bias,
        )
        self.room_layout = planner.plan(self.grid)
        direct, long = carver.stats
        logger.info("Layout: %d rooms (%d primary), %d direct / %d long corridors",
                    len(self.room_layout.rooms), self.room_layout.primary_count, direct, long)

    def _assign_archetypes(self):
        self._enter_stage(PipelineStage.ASSIGN_ARCHETYPES, "Assigning room archetypes...")
        planner = ArchetypePlanner(self.rng, self.settings.staircase_count)
        self.archetypes = planner.plan(self.room_layout.rooms)
        logger.info("Archetypes: %s", count_archetypes(self.archetypes))

    def _build_height_field(self):
        self._enter_stage(PipelineStage.BUILD_HEIGHT_FIELD, "Building height field...")
        s = self.settings
        generator = HeightFieldGenerator(
            self.rng,
            wall_height=s.wall_height,
            platform_level_height=s.platform_level_height,
            max_platform_tiers=s.max_platform_tiers,
            stacked_floor_count=s.stacked_floor_count,
            platform_footprint_min=s.platform_footprint_min,
            platform_footprint_max=s.platform_footprint_max,
        )
        self.height_field = generator.generate(self.grid, self.room_layout.rooms, self.archetypes)
        logger.info("Height field: %d tiles, %d ramps",
                    len(self.height_field.tiles), len(self.height_field.staircases.ramps))

    def _build_encounters(self):
        self._enter_stage(PipelineStage.BUILD_ENCOUNTERS, "Building encounters...")
        s = self.settings
        if s.spawn_enemies:
            builder = EncounterBuilder(
                self.rng, self.grid,
                wall_height=s.wall_height,
                corridor_width=s.corridor_width,
                barrier_thickness=s.barrier_thickness,
                min_enemies=s.min_enemies_per_room,
                max_enemies=s.max_enemies_per_room,
            )
            self.encounters = builder.build(self.room_layout.rooms, self.archetypes,
                                            self.height_field.top_heights)
        else:
            self.encounters = []
        logger.info("Encounters: %d rooms", len(self.encounters))

    def _validate(self, result: PipelineResult):
        self._enter_stage(PipelineStage.VALIDATE, "Validating layout...")
        validation = validate_layout(self.layout)
        result.validation = validation
        for issue in validation.errors + validation.warnings:
            logger.warning("Validation: %s", issue.format())
            result.add_warning(issue.format(), PipelineStage.VALIDATE)

    def _write_graph_dump(self, result: PipelineResult):
        """Write debug graph dump (DOT or JSON format)."""
        from .debug.graph_export import export_layout_dot, export_layout_json

        s = self.settings
        out_dir = Path(s.output_dir) if s.output_dir else Path("output") / "arenas"
        try:
            out_dir.mkdir(parents=True, exist_ok=True)
            if s.graph_dump_format == "json":
                content = export_layout_json(self.layout)
                graph_path = out_dir / f"{s.map_name}_debug.json"
            else:
                content = export_layout_dot(self.layout)
                graph_path = out_dir / f"{s.map_name}_debug.dot"

            graph_path.write_text(content, encoding='utf-8')
            result.output_files.append(str(graph_path))
            logger.info("Debug graph written: %s", graph_path)
        except OSError as e:
            result.add_warning(f"Failed to write debug graph: {e}")

    # -- main entry --

    def generate(self) -> PipelineResult:
        if self.is_running:
            raise PipelineError("Pipeline is already running")
        self.is_running = True
        result = PipelineResult(success=False)
        start_time = time.time()
        stage_times: Dict[str, float] = {}

        try:
            seed = resolve_seed(self.settings)
            self.rng = random.Random(seed)
            result.metrics['seed'] = seed
            logger.info("Generation seed: %d", seed)
            logger.info("Starting arena generation: %d rooms, %dx%d cells",
                        self.settings.desired_room_count, self.settings.grid_width, self.settings.grid_depth)

            stages = [
                (self._initialize, "Initialize"),
                (self._plan_rooms, "Plan rooms"),
                (self._assign_archetypes, "Assign archetypes"),
                (self._build_height_field, "Build height field"),
                (self._build_encounters, "Build encounters"),
            ]
            for stage_fn, desc in stages:
                logger.info("Stage: %s", desc)
                stage_start = time.time()
                stage_fn()
                stage_times[self.current_stage.value] = time.time() - stage_start
                result.stages_completed.append(self.current_stage)

            self.layout = ArenaLayout(
                seed=seed,
                grid=self.grid,
                room_layout=self.room_layout,
                archetypes=self.archetypes,
                height_field=self.height_field,
                encounters=self.encounters,
                wall_height=self.settings.wall_height,
                stacked_floor_count=self.settings.stacked_floor_count,
                lock_on_enter=self.settings.lock_on_enter,
            )
            result.layout = self.layout

            self._validate(result)
            result.stages_completed.append(PipelineStage.VALIDATE)

            if self.settings.enable_graph_dump:
                self._write_graph_dump(result)

            self.current_stage = PipelineStage.COMPLETE
            result.success = True
            result.metrics.update(self.layout.get_stats())
            result.metrics["stage_times"] = stage_times
            result.metrics["total_time"] = time.time() - start_time
            logger.info("Pipeline complete in %.2fs", result.metrics["total_time"])
        except Exception as e:
            logger.exception("Unexpected pipeline error")
            result.add_error(f"Unexpected error: {e}", self.current_stage)
        finally:
            self.is_running = False
        return result

    def create_spawn_placer(self) -> Optional[PlayerSpawnPlacer]:
        """Spawn placer for the last build, None when auto positioning is off"""
        if self.layout is None or not self.settings.auto_position_player:
            return None
        return self.layout.make_spawn_placer(
            fallback_height=self.settings.fallback_player_spawn_height,
            max_attempts=self.settings.max_spawn_attempts,
        )


def generate_arena(settings: Optional[PipelineSettings] = None) -> ArenaLayout:
    """Convenience wrapper: run the pipeline and return its layout"""
    result = ArenaPipeline(settings).generate()
    if not result.success:
        raise PipelineError("; ".join(result.errors) or "Arena generation failed")
    return result.layout
