"""HTTP API entrypoint for driving a tactical session from a web UI or planner."""

from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from battlefield.scenario import Scenario
from infra.logger import configure_from_settings, get_logger
from infra.settings import load_settings
from runtime.runner import TurnRunner
from tactics.errors import TacticsError

settings = load_settings()
configure_from_settings(settings)
log = get_logger(__name__)

app = FastAPI(title="Tactical decision engine")
runner: TurnRunner | None = None


# Allow browser-based control panels served from other origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


class StartRequest(BaseModel):
    scenario: dict
    sight_range: Optional[float] = None


class DirectiveRequest(BaseModel):
    team: str
    directive: dict


class TurnRequest(BaseModel):
    state: dict | None = None


class EvaluateRequest(BaseModel):
    character_id: str


def _require_runner() -> TurnRunner:
    if runner is None:
        raise HTTPException(400, "No active session")
    return runner


@app.post("/start")
def start(request: StartRequest):
    global runner
    try:
        scenario = Scenario.from_dict(request.scenario)
        if scenario.seed is None and settings.seed is not None:
            scenario.seed = settings.seed
        sight_range = request.sight_range if request.sight_range is not None else settings.sight_range
        runner = TurnRunner(scenario, sight_range=sight_range)
    except (TacticsError, ValueError, KeyError) as exc:
        raise HTTPException(400, str(exc)) from exc
    return {"success": True, "teams": list(runner.agents)}


@app.post("/directive")
def set_directive(request: DirectiveRequest):
    active = _require_runner()
    try:
        directive = active.set_directive(request.team, request.directive)
    except KeyError as exc:
        raise HTTPException(404, str(exc)) from exc
    except (TacticsError, ValueError, RuntimeError) as exc:
        raise HTTPException(400, str(exc)) from exc
    return {"success": True, "directive": directive.to_dict()}


@app.post("/turn")
def turn(request: TurnRequest):
    active = _require_runner()
    try:
        if request.state is not None:
            active.update_state(request.state)
        return active.step().to_dict()
    except (ValueError, KeyError, RuntimeError) as exc:
        raise HTTPException(400, str(exc)) from exc


@app.post("/evaluate")
def evaluate(request: EvaluateRequest):
    active = _require_runner()
    try:
        return active.evaluate(request.character_id).to_dict()
    except KeyError as exc:
        raise HTTPException(404, str(exc)) from exc
    except RuntimeError as exc:
        raise HTTPException(400, str(exc)) from exc


@app.post("/stop")
def stop():
    global runner
    active = _require_runner()
    active.stop()
    runner = None
    return {"success": True, "message": "Session stopped"}


@app.get("/status")
def status():
    if runner is None:
        return {"active": False}
    return {"active": True, "turn": runner.turn, "done": runner.done, "teams": list(runner.agents)}
