"""REST API routes for peer comparisons, growth simulation and scenarios."""

import functools

import structlog
from fastapi import APIRouter, HTTPException
from pydantic import Field, TypeAdapter, model_validator

from life_leveling.cache.keys import comparison_cache_key, scenarios_cache_key
from life_leveling.cache.memo import cached_compare, cached_simulate, invalidate, read_cached, write_cached
from life_leveling.cache.result_cache import ResultCache, build_result_cache
from life_leveling.comparison.age_ranges import bucket_age_range
from life_leveling.comparison.comparator import CohortComparator, cohort_statistics
from life_leveling.config import Settings, get_settings
from life_leveling.models.interest import AgeRange, CamelModel, Interest, UserRecord
from life_leveling.models.simulation import SimulationScenario
from life_leveling.simulation.tables import MAX_HORIZON_WEEKS
from life_leveling.simulation.tradeoffs import analyze_tradeoffs
from life_leveling.storage import scenarios as scenario_store
from life_leveling.storage import user_records

logger = structlog.get_logger()
router = APIRouter(prefix="/api")

SCENARIO_LIST = TypeAdapter(list[SimulationScenario])


class UserRecordUpdate(CamelModel):
    """Either ``ageRange`` ("13-15", "51+") or both numeric bounds."""

    age_range: str | None = None
    age_range_min: int | None = Field(default=None, ge=0)
    age_range_max: int | None = Field(default=None, ge=0)
    interests: list[Interest] = Field(default_factory=list)
    allow_peer_comparisons: bool = False

    @model_validator(mode="after")
    def resolve_age_range(self) -> "UserRecordUpdate":
        if self.age_range is not None:
            span = AgeRange.parse(self.age_range)
            self.age_range_min, self.age_range_max = span.min, span.max
        elif self.age_range_min is None or self.age_range_max is None:
            raise ValueError("ageRange or ageRangeMin and ageRangeMax are required")
        return self


class SimulationRequest(CamelModel):
    user_id: str
    effort_allocation: dict[str, float]
    timeframe_weeks: int = Field(ge=1, le=MAX_HORIZON_WEEKS)
    current_interests: list[Interest]


class ComparisonPreferenceUpdate(CamelModel):
    user_id: str
    allow_peer_comparisons: bool


class TradeOffRequest(CamelModel):
    effort_allocation: dict[str, float]
    interests: list[Interest]


class ScenarioCreateRequest(SimulationRequest):
    scenario_name: str = Field(min_length=1, max_length=200)


@functools.lru_cache
def get_result_cache() -> ResultCache:
    settings = get_settings()
    return build_result_cache(settings.redis_url, settings.cache_prefix)


def validate_user_id(user_id: str) -> str:
    try:
        return user_records.validate_user_id(user_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid user ID format")


def _load_opted_in_subject(settings: Settings, user_id: str) -> UserRecord:
    subject = user_records.load_user(settings.users_dir, validate_user_id(user_id))
    if subject is None:
        raise HTTPException(status_code=404, detail="User not found")
    if not subject.allow_peer_comparisons:
        raise HTTPException(status_code=403, detail="User has not opted into peer comparisons")
    return subject


@router.put("/users/{user_id}")
async def upsert_user(user_id: str, body: UserRecordUpdate) -> dict:
    """Store a user's interests with their age range bucketed for cohorts."""
    settings = get_settings()
    record = UserRecord(
        user_id=validate_user_id(user_id),
        age_range=bucket_age_range(body.age_range_min, body.age_range_max),
        interests=body.interests,
        allow_peer_comparisons=body.allow_peer_comparisons,
    )
    user_records.save_user(settings.users_dir, record)
    invalidate(get_result_cache(), comparison_cache_key(record.user_id))
    return {"success": True, "data": record.model_dump(mode="json", by_alias=True)}


@router.post("/simulate")
async def simulate(body: SimulationRequest) -> dict:
    """Forecast skill growth for a hypothetical effort allocation."""
    settings = get_settings()
    results, cached = cached_simulate(
        get_result_cache(),
        validate_user_id(body.user_id),
        body.current_interests,
        body.effort_allocation,
        body.timeframe_weeks,
        settings.simulation_cache_ttl_seconds,
    )
    return {
        "success": True,
        "forecastedResults": {
            category: result.model_dump(mode="json", by_alias=True)
            for category, result in results.items()
        },
        "cached": cached,
    }


@router.get("/comparisons")
async def get_comparisons(user_id: str) -> dict:
    """Compare every interest of an opted-in user against their cohorts."""
    settings = get_settings()
    subject = _load_opted_in_subject(settings, user_id)
    population = user_records.load_comparison_population(settings.users_dir)
    comparisons, cached = cached_compare(
        get_result_cache(), subject, population, settings.comparison_cache_ttl_seconds
    )
    return {
        "success": True,
        "data": [c.model_dump(mode="json", by_alias=True) for c in comparisons],
        "cached": cached,
    }


@router.get("/comparisons/preferences")
async def get_comparison_preference(user_id: str) -> dict:
    settings = get_settings()
    record = user_records.load_user(settings.users_dir, validate_user_id(user_id))
    if record is None:
        raise HTTPException(status_code=404, detail="User not found")
    return {"success": True, "data": {"allowPeerComparisons": record.allow_peer_comparisons}}


@router.put("/comparisons/preferences")
async def update_comparison_preference(body: ComparisonPreferenceUpdate) -> dict:
    settings = get_settings()
    try:
        record = user_records.set_comparison_preference(
            settings.users_dir, validate_user_id(body.user_id), body.allow_peer_comparisons
        )
    except KeyError:
        raise HTTPException(status_code=404, detail="User not found")
    invalidate(get_result_cache(), comparison_cache_key(record.user_id))
    logger.info(
        "comparison_preference_updated",
        user_id=record.user_id,
        allow=record.allow_peer_comparisons,
    )
    return {"success": True, "allowPeerComparisons": record.allow_peer_comparisons}


@router.get("/comparisons/{category}")
async def get_category_comparison(category: str, user_id: str) -> dict:
    """Compare a single interest category."""
    settings = get_settings()
    subject = _load_opted_in_subject(settings, user_id)
    population = user_records.load_comparison_population(settings.users_dir)
    comparison = CohortComparator().compare_category(subject, population, category)
    if comparison is None:
        raise HTTPException(status_code=404, detail="No comparison data available for this interest")
    return {"success": True, "data": comparison.model_dump(mode="json", by_alias=True)}


@router.get("/admin/cohort-stats")
async def get_cohort_stats() -> dict:
    """Per-level head-counts for every cohort of opted-in users."""
    settings = get_settings()
    stats = cohort_statistics(user_records.load_comparison_population(settings.users_dir))
    return {"success": True, "data": [s.model_dump(mode="json", by_alias=True) for s in stats]}


@router.post("/tradeoffs")
async def get_tradeoffs(body: TradeOffRequest) -> dict:
    tradeoffs = analyze_tradeoffs(body.effort_allocation, body.interests)
    return {"success": True, "data": [t.model_dump(mode="json", by_alias=True) for t in tradeoffs]}


@router.post("/scenarios", status_code=201)
async def create_scenario(body: ScenarioCreateRequest) -> dict:
    """Simulate and save a named scenario."""
    settings = get_settings()
    user_id = validate_user_id(body.user_id)
    cache = get_result_cache()
    results, _ = cached_simulate(
        cache,
        user_id,
        body.current_interests,
        body.effort_allocation,
        body.timeframe_weeks,
        settings.simulation_cache_ttl_seconds,
    )
    scenario = SimulationScenario(
        user_id=user_id,
        scenario_name=body.scenario_name,
        effort_allocation=body.effort_allocation,
        timeframe_weeks=body.timeframe_weeks,
        forecasted_results=results,
    )
    scenario_store.append_scenario(settings.scenarios_dir, scenario)
    invalidate(cache, scenarios_cache_key(user_id))
    logger.info("scenario_saved", user_id=user_id, scenario_id=scenario.id)
    return {"success": True, "scenario": scenario.model_dump(mode="json", by_alias=True)}


@router.get("/scenarios")
async def list_scenarios(user_id: str) -> dict:
    """A user's saved scenarios, newest first."""
    settings = get_settings()
    user_id = validate_user_id(user_id)
    cache = get_result_cache()
    key = scenarios_cache_key(user_id)
    scenarios = read_cached(cache, key, SCENARIO_LIST)
    if scenarios is None:
        scenarios = scenario_store.read_scenarios(settings.scenarios_dir, user_id)
        write_cached(cache, key, scenarios, SCENARIO_LIST, settings.scenario_cache_ttl_seconds)
    return {
        "success": True,
        "scenarios": [s.model_dump(mode="json", by_alias=True) for s in scenarios],
    }


@router.get("/scenarios/{scenario_id}")
async def get_scenario(scenario_id: str, user_id: str) -> dict:
    settings = get_settings()
    scenario = scenario_store.get_scenario(
        settings.scenarios_dir, scenario_id, validate_user_id(user_id)
    )
    if scenario is None:
        raise HTTPException(status_code=404, detail="Scenario not found")
    return {"success": True, "scenario": scenario.model_dump(mode="json", by_alias=True)}


@router.post("/scenarios/{scenario_id}/converted")
async def convert_scenario_to_goals(scenario_id: str, user_id: str) -> dict:
    """Flag a scenario as turned into goals. The flag never resets."""
    settings = get_settings()
    user_id = validate_user_id(user_id)
    try:
        scenario_store.mark_converted_to_goals(settings.scenarios_dir, scenario_id, user_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Scenario not found")
    except ValueError:
        raise HTTPException(status_code=409, detail="Scenario already converted to goals")
    invalidate(get_result_cache(), scenarios_cache_key(user_id))
    logger.info("scenario_converted", user_id=user_id, scenario_id=scenario_id)
    scenario = scenario_store.get_scenario(settings.scenarios_dir, scenario_id, user_id)
    return {"success": True, "scenario": scenario.model_dump(mode="json", by_alias=True)}


@router.delete("/scenarios/{scenario_id}")
async def delete_scenario(scenario_id: str, user_id: str) -> dict:
    settings = get_settings()
    user_id = validate_user_id(user_id)
    try:
        scenario_store.remove_scenario(settings.scenarios_dir, scenario_id, user_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Scenario not found")
    invalidate(get_result_cache(), scenarios_cache_key(user_id))
    logger.info("scenario_deleted", user_id=user_id, scenario_id=scenario_id)
    return {"success": True, "message": "Scenario deleted"}


@router.get("/health")
async def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "ok"}
