"""
Operations Layer

Pure ranking computations with no storage access:
- StandingsCalculator: ladder and box tier ordering with strict tie-breaks
- PromotionEngine: promotion/relegation directives between adjacent tiers

Result submission lives in clubrank.database.result_operations because it is
a storage transaction.
"""
