import logging
import os

from dotenv import load_dotenv

load_dotenv()

DATABASE_URI = os.getenv("PAGEREPO_DATABASE_URI", "sqlite:///:memory:")
SQL_ECHO = os.getenv("PAGEREPO_SQL_ECHO", "false").lower() in ("1", "true", "yes")

DEFAULT_PAGE_SIZE = int(os.getenv("PAGEREPO_DEFAULT_PAGE_SIZE", "20"))
ENTITY_CACHE_SIZE = int(os.getenv("PAGEREPO_ENTITY_CACHE_SIZE", "10000"))

LOG_LEVEL = os.getenv("PAGEREPO_LOG_LEVEL", "INFO").upper()

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s - %(levelname)s - %(message)s")
