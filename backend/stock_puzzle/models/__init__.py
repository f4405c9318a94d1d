"""Database model exports."""

from .prediction import Prediction, UserPrediction
from .puzzle import DailyCompany, Puzzle

__all__ = [
    "Puzzle",
    "DailyCompany",
    "UserPrediction",
    "Prediction",
]
