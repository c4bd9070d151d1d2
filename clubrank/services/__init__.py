"""
Services package for the club ranking engine.
"""

from .base import BaseService
from .notifications import ResultNotifier
from .standings_service import StandingsService

__all__ = ['BaseService', 'ResultNotifier', 'StandingsService']
