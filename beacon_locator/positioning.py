# positioning.py
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import NamedTuple

import numpy as np

from .errors import DegenerateGeometry, InsufficientBeacons

# --- Константы для перевода RSSI в метры ---
# Подбираются экспериментально под маячки и помещение.
A = -59  # "Эталонное" RSSI на расстоянии 1 метр
N = 2.0  # Коэффициент затухания сигнала (2.0 - свободное пространство)


class ReferencePosition(NamedTuple):
    x: float
    y: float


@dataclass(frozen=True)
class PositionEstimate:
    x: float
    y: float
    computed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def as_payload(self):
        return {"x": self.x, "y": self.y}

    def __str__(self):
        return f"Estimated Position: (X: {self.x:.2f}, Y: {self.y:.2f})"


def rssi_to_distance(rssi, reference_rssi=A, path_loss_exponent=N):
    """
    Преобразует значение RSSI в расстояние в метрах (log-distance модель).

    Для любых конечных входов возвращает число: при переполнении - inf.
    """
    with np.errstate(over="ignore"):
        return float(np.power(10.0, (reference_rssi - rssi) / (10 * path_loss_exponent)))


def distance_to_rssi(distance, reference_rssi=A, path_loss_exponent=N):
    """Обратное преобразование: какое RSSI даст маячок на расстоянии distance."""
    return reference_rssi - 10 * path_loss_exponent * np.log10(distance)


def trilaterate(references, distances):
    """
    Вычисляет позицию (x, y) по трём опорным точкам и расстояниям до них.

    Вычитаем уравнение первой окружности из второй и третьей, квадраты
    неизвестных сокращаются и остаётся линейная система 2x2.
    references - три ReferencePosition (или пары (x, y)), distances - три числа.
    """
    if len(references) != 3 or len(distances) != 3:
        raise ValueError(
            f"Trilateration needs exactly 3 references and 3 distances, "
            f"got {len(references)} and {len(distances)}"
        )

    coords = np.array(references, dtype=float)
    r1, r2, r3 = np.asarray(distances, dtype=float)
    (x1, y1), (x2, y2), (x3, y3) = coords

    a = 2 * (x2 - x1)
    b = 2 * (y2 - y1)
    d = 2 * (x3 - x1)
    e = 2 * (y3 - y1)

    denominator = a * e - b * d
    if denominator == 0:
        raise DegenerateGeometry("Unable to calculate position (denominator=0)")

    # Бесконечное расстояние даёт inf/nan в ответе, а не исключение
    with np.errstate(over="ignore", invalid="ignore"):
        c = r1 ** 2 - r2 ** 2 - x1 ** 2 + x2 ** 2 - y1 ** 2 + y2 ** 2
        f = r1 ** 2 - r3 ** 2 - x1 ** 2 + x3 ** 2 - y1 ** 2 + y3 ** 2
        x = (c * e - b * f) / denominator
        y = (a * f - c * d) / denominator
    return PositionEstimate(float(x), float(y))


class PositionCalculator:
    def __init__(self, references, reference_rssi=A, path_loss_exponent=N):
        # references - ровно три точки, по одной на слот обнаружения (0, 1, 2)
        if len(references) != 3:
            raise ValueError(f"Expected 3 reference positions, got {len(references)}")
        self.references = tuple(references)
        self.reference_rssi = reference_rssi
        self.path_loss_exponent = path_loss_exponent

    def distances(self, observations):
        return [rssi_to_distance(o.rssi, self.reference_rssi, self.path_loss_exponent)
                for o in observations]

    def calculate_position(self, observations):
        """
        Вычисляет позицию по первым трём наблюдениям в порядке обнаружения.

        Маячок сопоставляется с опорной точкой по номеру слота, а не по имени.
        """
        observations = list(observations)
        if len(observations) < 3:
            raise InsufficientBeacons(len(observations))
        return trilaterate(self.references, self.distances(observations[:3]))
