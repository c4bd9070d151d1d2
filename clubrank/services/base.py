"""
Base service class for the club ranking engine.

Provides async session management and retry logic for storage-backed
service operations.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Callable, Any, Tuple, Type
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

class BaseService:
    """Base class for all services with async database session management."""
    
    def __init__(self, database):
        """
        Initialize base service with the storage context.
        
        Args:
            database: Initialized Database instance
        """
        self.db = database
    
    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """Provide a read scope; nothing is committed."""
        async with self.db.get_session() as session:
            yield session
    
    async def execute_with_retry(self, func: Callable, max_retries: int = 3,
                                 retry_on: Tuple[Type[Exception], ...] = (OperationalError,)) -> Any:
        """Execute a function with automatic retry on transient database errors."""
        for attempt in range(max_retries):
            try:
                return await func()
            except retry_on as e:
                if attempt == max_retries - 1:
                    raise
                logger.warning(f"Retry attempt {attempt + 1} for {func.__name__}: {e}")
                await asyncio.sleep(0.1 * (2 ** attempt))  # Exponential backoff
