import os
from dotenv import load_dotenv

load_dotenv()

class Config:
    """Ranking engine configuration settings"""
    
    # Database settings
    DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///clubrank.db')
    
    # Runtime settings
    DEBUG = os.getenv('DEBUG', 'False').lower() == 'true'
    LOG_DIR = os.getenv('CLUBRANK_LOG_DIR', 'logs')
    LOG_TO_FILE = os.getenv('CLUBRANK_LOG_TO_FILE', 'True').lower() == 'true'
    
    # Rating settings
    DEFAULT_RATING = float(os.getenv('CLUBRANK_DEFAULT_RATING', 1200.0))
    RATING_MIN = 0.0       # Accepted range for imported/created ratings
    RATING_MAX = 3000.0
    
    # Elo calculation settings
    K_FACTOR_PROVISIONAL = 40  # First 30 matches
    K_FACTOR_STANDARD = 32     # Established players
    K_FACTOR_MASTER = 16       # Established players at or above the master threshold
    PROVISIONAL_MATCH_COUNT = 30
    MASTER_RATING_THRESHOLD = 2400
    
    @classmethod
    def get_async_database_url(cls) -> str:
        """Get the database URL with an async driver"""
        database_url = cls.DATABASE_URL
        if database_url.startswith('sqlite:///'):
            database_url = database_url.replace('sqlite:///', 'sqlite+aiosqlite:///')
        return database_url
    
    @classmethod
    def validate(cls):
        """Validate that configuration values are consistent"""
        if not cls.DATABASE_URL:
            raise ValueError("DATABASE_URL is required")
        if not cls.RATING_MIN <= cls.DEFAULT_RATING <= cls.RATING_MAX:
            raise ValueError(
                f"DEFAULT_RATING must be within [{cls.RATING_MIN}, {cls.RATING_MAX}]"
            )
        if cls.PROVISIONAL_MATCH_COUNT < 0:
            raise ValueError("PROVISIONAL_MATCH_COUNT must not be negative")
        for name in ('K_FACTOR_PROVISIONAL', 'K_FACTOR_STANDARD', 'K_FACTOR_MASTER'):
            if getattr(cls, name) <= 0:
                raise ValueError(f"{name} must be positive")
