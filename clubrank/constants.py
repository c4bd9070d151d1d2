"""
Engine-wide constants for the club ranking engine.

Values here are fixed by the result wire format and are not meant to be
tuned per deployment; tunable values live in clubrank.config.
"""

class SetScoreConstants:
    """Bounds for reported set scores."""
    
    # Games per side in a single set
    MIN_GAMES = 0
    MAX_GAMES = 20
    
    # Sets per match
    MIN_SETS = 1
    MAX_SETS = 5

class RatingConstants:
    """Constants related to Elo calculations."""
    
    # Logistic curve scale: a 400 point gap means 10:1 expected odds
    ELO_SCALE = 400
    
    # Tolerance when checking that match scores sum to one
    SCORE_SUM_TOLERANCE = 1e-9
