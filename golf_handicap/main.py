import logging
from pathlib import Path

from fastapi import FastAPI, Request, Depends, Body, Form, HTTPException, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse, RedirectResponse, JSONResponse
from fastapi.templating import Jinja2Templates
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import crud, schemas
from .config import LOG_LEVEL, HISTORY_MONTHS
from .db import Base, engine, get_db
from .golf_calc import compute_handicap_index, compute_handicap_history

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

Base.metadata.create_all(bind=engine)

app = FastAPI(title="Golf Handicap Tracker")

templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))

ROUND_FIELDS = ("date", "course", "tee", "rating", "slope", "score")
NUMERIC_FIELDS = {"rating", "slope", "score"}


# ================================================================================
# ================================== ERRORES =====================================
# ================================================================================

@app.exception_handler(StarletteHTTPException)
async def http_error(request: Request, exc: StarletteHTTPException):
    return JSONResponse({"error": exc.detail}, status_code=exc.status_code)


@app.exception_handler(SQLAlchemyError)
async def db_error(request: Request, exc: SQLAlchemyError):
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return JSONResponse({"error": "Internal server error"}, status_code=500)


def first_error(errors) -> str:
    err = errors[0]
    field = ".".join(str(x) for x in err["loc"])
    return f"{field}: {err['msg']}"


@app.exception_handler(RequestValidationError)
async def request_error(request: Request, exc: RequestValidationError):
    msg = first_error(exc.errors())
    logger.warning("Request rejected on %s %s: %s", request.method, request.url.path, msg)
    return JSONResponse({"error": msg}, status_code=400)


def round_error_message(exc: ValidationError) -> str:
    # Mismos mensajes que la API original
    for err in exc.errors():
        field = err["loc"][0] if err["loc"] else None
        if field in NUMERIC_FIELDS and (
            err["type"].endswith("_parsing") or err["type"] == "finite_number"
        ):
            return "Invalid numeric values"
    return first_error(exc.errors())


def parse_round(payload: dict) -> schemas.RoundCreate:
    if not payload.get("player_id"):
        raise HTTPException(status_code=400, detail="Player ID required")

    if any(not payload.get(k) for k in ROUND_FIELDS):
        raise HTTPException(status_code=400, detail="All round fields are required")

    try:
        return schemas.RoundCreate(**payload)
    except ValidationError as e:
        msg = round_error_message(e)
        logger.warning("Round rejected: %s", msg)
        raise HTTPException(status_code=400, detail=msg)


def get_player_or_404(db: Session, player_id: int):
    player = crud.get_player(db, player_id)
    if not player:
        raise HTTPException(status_code=404, detail="Player not found")
    return player


# ================================================================================
# ================================== API: PLAYERS ================================
# ================================================================================

@app.get("/api/players", response_model=list[schemas.PlayerOut])
def api_players(db: Session = Depends(get_db)):
    return crud.get_players(db)


@app.post("/api/players", response_model=schemas.PlayerOut)
def api_player_create(payload: dict = Body(...), db: Session = Depends(get_db)):
    try:
        data = schemas.PlayerCreate(
            name=payload.get("name") or "",
            favorite_course=payload.get("favorite_course"),
        )
    except ValidationError:
        logger.warning("Player rejected: missing name")
        raise HTTPException(status_code=400, detail="Name is required")

    return crud.create_player(db, data)


@app.delete("/api/players/{player_id}", status_code=204)
def api_player_delete(player_id: int, db: Session = Depends(get_db)):
    if not crud.delete_player(db, player_id):
        raise HTTPException(status_code=404, detail="Player not found")
    return Response(status_code=204)


@app.get("/api/players/{player_id}/handicap", response_model=schemas.HandicapOut)
def api_player_handicap(player_id: int, db: Session = Depends(get_db)):
    get_player_or_404(db, player_id)
    rounds = crud.get_rounds_for_player(db, player_id)
    return schemas.HandicapOut(
        player_id=player_id,
        handicap=compute_handicap_index(rounds),
        rounds=len(rounds),
    )


@app.get(
    "/api/players/{player_id}/handicap/history",
    response_model=list[schemas.HandicapHistoryPoint],
)
def api_player_handicap_history(player_id: int, db: Session = Depends(get_db)):
    get_player_or_404(db, player_id)
    rounds = crud.get_rounds_for_player(db, player_id)
    return compute_handicap_history(rounds, months=HISTORY_MONTHS)


# ================================================================================
# ================================== API: ROUNDS =================================
# ================================================================================

@app.get("/api/rounds", response_model=list[schemas.RoundOut])
def api_rounds(player_id: int | None = None, db: Session = Depends(get_db)):
    # sin jugador -> lista vacía (no es un error)
    if not player_id:
        return []
    return crud.round_rows(crud.get_rounds_for_player(db, player_id))


@app.post("/api/rounds", response_model=schemas.RoundOut)
def api_round_create(payload: dict = Body(...), db: Session = Depends(get_db)):
    data = parse_round(payload)
    get_player_or_404(db, data.player_id)

    r = crud.create_round(db, data)
    return crud.round_rows([r])[0]


@app.delete("/api/rounds/{round_id}", status_code=204)
def api_round_delete(round_id: int, db: Session = Depends(get_db)):
    if not crud.delete_round(db, round_id):
        raise HTTPException(status_code=404, detail="Round not found")
    return Response(status_code=204)


# ================================================================================
# ================================== DASHBOARD ===================================
# ================================================================================

def render_dashboard(request: Request, db: Session, player_id: int | None,
                     error: str | None = None, status_code: int = 200):
    players = crud.get_players(db)

    selected = None
    if player_id:
        selected = next((p for p in players if p.id == player_id), None)
    elif players:
        selected = players[0]

    rounds = crud.get_rounds_for_player(db, selected.id) if selected else []
    summary = crud.player_summary(rounds)

    return templates.TemplateResponse(
        request,
        "dashboard.html",
        {
            "players": players,
            "selected": selected,
            "summary": summary,
            "recent_rounds": crud.round_rows(summary["recent_rounds"]),
            "has_more": len(rounds) > crud.RECENT_ROUNDS,
            "error": error,
        },
        status_code=status_code,
    )


@app.get("/", response_class=HTMLResponse, name="dashboard")
def dashboard(request: Request, player_id: int | None = None, db: Session = Depends(get_db)):
    return render_dashboard(request, db, player_id)


@app.post("/players/new")
def player_new(
    request: Request,
    name: str = Form(""),
    favorite_course: str = Form(""),
    db: Session = Depends(get_db),
):
    try:
        data = schemas.PlayerCreate(name=name, favorite_course=favorite_course)
    except ValidationError:
        logger.warning("Player form rejected: missing name")
        return render_dashboard(request, db, None, error="El nombre es obligatorio", status_code=400)

    p = crud.create_player(db, data)
    return RedirectResponse(f"/?player_id={p.id}", status_code=303)


@app.post("/rounds/new")
async def round_new(request: Request, db: Session = Depends(get_db)):
    form = await request.form()
    payload = {k: form.get(k) for k in ("player_id",) + ROUND_FIELDS}

    raw_pid = payload["player_id"]
    player_id = int(raw_pid) if raw_pid and raw_pid.isdigit() else None

    try:
        data = parse_round(payload)
    except HTTPException as e:
        return render_dashboard(request, db, player_id, error=e.detail, status_code=400)

    if not crud.get_player(db, data.player_id):
        return render_dashboard(request, db, None, error="Jugador no encontrado", status_code=404)

    crud.create_round(db, data)
    return RedirectResponse(f"/?player_id={data.player_id}", status_code=303)


# ================================================================================
# ================================== PERFIL ======================================
# ================================================================================

@app.get("/players/{player_id}", response_class=HTMLResponse, name="player_profile")
def player_profile(player_id: int, request: Request, db: Session = Depends(get_db)):
    player = crud.get_player(db, player_id)
    if not player:
        return HTMLResponse("Jugador no encontrado", status_code=404)

    rounds = crud.get_rounds_for_player(db, player_id)   # más recientes primero
    summary = crud.player_summary(rounds)
    history = compute_handicap_history(rounds, months=HISTORY_MONTHS)

    return templates.TemplateResponse(
        request,
        "profile.html",
        {
            "player": player,
            "summary": summary,
            "rounds": crud.round_rows(rounds),
            "history": [h.model_dump(mode="json") for h in history],
            "history_months": HISTORY_MONTHS,
        },
    )


# ---------------------------------------------------------------------------


@app.get("/health")
def health():
    return {"status": "ok"}
