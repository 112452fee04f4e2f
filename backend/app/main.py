import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError

from .db import InMemoryDatabase, db, settings
from .errors import GatewayError, InvalidTransition, NotFoundError
from .game import controller
from .schemas import AnswerIn, NavigateIn, PickCategoryIn, ScoreIn
from .seed import load_seed

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.SEED_FILE and isinstance(db, InMemoryDatabase):
        await load_seed(db, settings.SEED_FILE)

    try:
        await controller.load_categories()
    except GatewayError:
        logger.warning("Starting without categories; use /api/categories/refresh to retry")

    yield

    logger.info("Server shutting down")


app = FastAPI(title="Game Night Quiz API", lifespan=lifespan)

origins = [o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()]
origin_regex = settings.CORS_ORIGIN_REGEX or None

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins or ["*"],
    allow_origin_regex=origin_regex,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(InvalidTransition)
async def invalid_transition_handler(request: Request, exc: InvalidTransition):
    return JSONResponse(status_code=409, content={"detail": str(exc)})


@app.exception_handler(GatewayError)
async def gateway_error_handler(request: Request, exc: GatewayError):
    status = 404 if isinstance(exc, NotFoundError) else 502
    return JSONResponse(status_code=status, content={"detail": str(exc)})


@app.get("/api/state")
async def get_state():
    return controller.view()


@app.post("/api/session/reset")
async def reset():
    await controller.reset()
    return controller.view()


@app.post("/api/rules/dismiss")
async def dismiss_rules():
    await controller.dismiss_rules()
    return controller.view()


@app.post("/api/navigate")
async def navigate(payload: NavigateIn):
    await controller.navigate(payload.target)
    return controller.view()


@app.post("/api/teams/draw")
async def draw_teams():
    await controller.draw_teams()
    return controller.view()


@app.post("/api/teams/{team_id}/score")
async def adjust_score(team_id: int, payload: ScoreIn | None = None):
    delta = payload.delta if payload else settings.SCORE_STEP
    await controller.adjust_score(team_id, delta)
    return controller.view()


@app.post("/api/round/lightning")
async def toggle_lightning():
    await controller.toggle_lightning()
    return controller.view()


@app.post("/api/round/next")
async def next_round():
    await controller.next_round()
    return controller.view()


@app.post("/api/categories/refresh")
async def refresh_categories():
    await controller.load_categories()
    return controller.view()


@app.post("/api/categories/pick")
async def pick_category(payload: PickCategoryIn):
    await controller.pick_category(payload.theme)
    return controller.view()


@app.post("/api/categories/draw")
async def draw_category():
    await controller.draw_category()
    return controller.view()


@app.post("/api/question/{question_id}/open")
async def open_question(question_id: int):
    await controller.open_question(question_id)
    return controller.view()


@app.post("/api/question/answer")
async def answer(payload: AnswerIn):
    await controller.select_option(payload.option)
    return controller.view()


@app.post("/api/question/reveal")
async def reveal_answer():
    await controller.reveal_answer()
    return controller.view()


@app.post("/api/question/mark-used")
async def mark_used():
    await controller.mark_used()
    return controller.view()


@app.get("/api/health")
async def health():
    if not isinstance(db, InMemoryDatabase):
        try:
            await db.command("ping")
        except PyMongoError as exc:
            raise HTTPException(status_code=503, detail="Data store unreachable") from exc
    return {"ok": True}
