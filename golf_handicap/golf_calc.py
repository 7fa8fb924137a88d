import calendar
import logging
from datetime import date
from decimal import Decimal, ROUND_HALF_UP

from .schemas import HandicapHistoryPoint

logger = logging.getLogger(__name__)

HANDICAP_MULTIPLIER = 0.96
MIN_ROUNDS = 3


def differential(r) -> float:
    # (Score - Rating) × 113 / Slope, sin redondear
    if not r.slope:
        raise ValueError("slope must be non-zero")
    return ((r.score - r.rating) * 113) / r.slope


def rounds_to_use(total_rounds: int) -> int:
    """
    Cuántos diferenciales (los mejores) entran en la media según el total.
    0 = todavía no hay hándicap (menos de 3 vueltas).
    """
    if total_rounds >= 20: return 8
    if total_rounds == 19: return 7
    if total_rounds == 18: return 6
    if total_rounds >= 15: return 5
    if total_rounds >= 12: return 4
    if total_rounds >= 9: return 3
    if total_rounds >= 6: return 2
    if total_rounds >= 3: return 1
    return 0


def round_half_up(value: float, places: int = 1) -> float:
    # Igual que toFixed(): valor binario exacto, mitades lejos del cero
    q = Decimal(1).scaleb(-places)
    return float(Decimal(value).quantize(q, rounding=ROUND_HALF_UP))


def compute_handicap_index(rounds) -> float:
    """
    rounds: lista de vueltas (cualquier objeto con score, rating, slope)
    devuelve el hándicap con 1 decimal, 0.0 si hay menos de 3 vueltas
    """
    num_to_use = rounds_to_use(len(rounds))
    if num_to_use == 0:
        return 0.0

    diffs = sorted(differential(r) for r in rounds)
    best = diffs[:num_to_use]
    avg = sum(best) / len(best)

    return round_half_up(avg * HANDICAP_MULTIPLIER, 1)


def months_before(day: date, months: int) -> date:
    # Resta de meses de calendario; si el día no existe se ajusta al último del mes
    total = day.year * 12 + (day.month - 1) - months
    year, month = divmod(total, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def compute_handicap_history(rounds, today: date | None = None, months: int = 6):
    """
    Evolución del hándicap para la gráfica.

    Por cada vuelta (de la más antigua a la más reciente) se calcula el
    hándicap con todas las vueltas hasta ella incluida. Solo se emiten los
    puntos de vueltas dentro de los últimos `months` meses y con al menos
    3 vueltas acumuladas.
    """
    if len(rounds) < MIN_ROUNDS:
        return []

    ordered = sorted(rounds, key=lambda r: r.date)
    cutoff = months_before(today or date.today(), months)

    history = []
    for i, r in enumerate(ordered):
        prefix = ordered[: i + 1]
        if r.date >= cutoff and len(prefix) >= MIN_ROUNDS:
            history.append(
                HandicapHistoryPoint(
                    date=r.date,
                    handicap=compute_handicap_index(prefix),
                    rounds=len(prefix),
                )
            )

    logger.debug("Handicap history: %d points (cutoff %s)", len(history), cutoff)
    return history
