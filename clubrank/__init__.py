"""
Club ranking engine: Elo ladder ratings, atomic result submission, box league
standings and promotion/relegation.
"""

__version__ = "0.1.0"
