"""
Data transfer objects for the club ranking engine.
"""
