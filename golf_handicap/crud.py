import logging
from datetime import date

from sqlalchemy.orm import Session

from . import models, schemas
from .golf_calc import compute_handicap_index, differential, round_half_up

logger = logging.getLogger(__name__)

RECENT_ROUNDS = 10


#---------------------------------------------------------------------------------
# ---------------------------------- Players -------------------------------------
# --------------------------------------------------------------------------------

def get_players(db: Session):
    return db.query(models.Player).order_by(models.Player.name).all()

def get_player(db: Session, player_id: int):
    return db.query(models.Player).filter(models.Player.id == player_id).first()

def create_player(db: Session, data: schemas.PlayerCreate):
    p = models.Player(**data.model_dump())
    db.add(p)
    db.commit()
    db.refresh(p)
    logger.info("Player created: %s (id=%s)", p.name, p.id)
    return p

def delete_player(db: Session, player_id: int):
    p = get_player(db, player_id)
    if not p:
        return False
    # sus vueltas se borran por cascade
    db.delete(p)
    db.commit()
    logger.info("Player deleted: id=%s", player_id)
    return True


#---------------------------------------------------------------------------------
# ------------------------------------- Rounds -----------------------------------
# --------------------------------------------------------------------------------

def get_round(db: Session, round_id: int):
    return db.query(models.Round).filter(models.Round.id == round_id).first()

def get_rounds_for_player(db: Session, player_id: int):
    return (
        db.query(models.Round)
        .filter(models.Round.player_id == player_id)
        .order_by(models.Round.date.desc(), models.Round.id.desc())
        .all()
    )

def create_round(db: Session, data: schemas.RoundCreate):
    r = models.Round(**data.model_dump())
    db.add(r)
    db.commit()
    db.refresh(r)
    logger.info("Round created: player=%s date=%s score=%s", r.player_id, r.date, r.score)
    return r

def delete_round(db: Session, round_id: int):
    r = get_round(db, round_id)
    if not r:
        return False
    db.delete(r)
    db.commit()
    logger.info("Round deleted: id=%s", round_id)
    return True


def round_rows(rounds):
    # vueltas + diferencial con 1 decimal (para tablas)
    rows = []
    for r in rounds:
        row = schemas.RoundOut.model_validate(r)
        row.differential = round_half_up(differential(r), 1)
        rows.append(row)
    return rows


#---------------------------------------------------------------------------------
# ------------------------------------- KPIs -------------------------------------
# --------------------------------------------------------------------------------

def player_summary(rounds, today: date | None = None):
    """
    KPIs de un jugador a partir de sus vueltas (en cualquier orden):
    hándicap actual, vueltas totales, vueltas de este año, media, mejor
    vuelta y las 10 más recientes.
    """
    today = today or date.today()
    scores = [r.score for r in rounds]

    recent = sorted(rounds, key=lambda r: r.date, reverse=True)[:RECENT_ROUNDS]

    return {
        "handicap": compute_handicap_index(rounds),
        "total_rounds": len(rounds),
        "rounds_this_year": len([r for r in rounds if r.date.year == today.year]),
        "average_score": round_half_up(sum(scores) / len(scores), 1) if scores else None,
        "best_score": min(scores) if scores else None,
        "recent_rounds": recent,
    }
