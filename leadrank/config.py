"""
Centralized configuration — all env vars and run constants.
"""
import os


# ── Logging ──────────────────────────────────────────────────────────────────
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
LOG_FORMAT = os.getenv('LOG_FORMAT', 'text')

# ── Redis ─────────────────────────────────────────────────────────────────────
REDIS_URL = os.getenv('REDIS_URL', 'redis://localhost:6379/0')

# ── PostgreSQL ────────────────────────────────────────────────────────────────
DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///local.db')

# ── LLM (any OpenAI-compatible endpoint, Groq by default) ────────────────────
LLM_API_KEY = os.getenv('LLM_API_KEY') or os.getenv('GROQ_API_KEY') or os.getenv('OPENAI_API_KEY')
LLM_BASE_URL = os.getenv('LLM_BASE_URL', 'https://api.groq.com/openai/v1')
LLM_MODEL = os.getenv('LLM_MODEL', 'llama-3.3-70b-versatile')
LLM_TIMEOUT = float(os.getenv('LLM_TIMEOUT', '60'))

# ── Lead ingestion ───────────────────────────────────────────────────────────
LEADS_CSV_PATH = os.getenv(
    'LEADS_CSV_PATH',
    os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'data', 'leads.csv'),
)

# ── Run status values ─────────────────────────────────────────────────────────
RUN_STATUSES = [
    'pending',
    'running',
    'completed',
    'failed',
]
TERMINAL_STATUSES = ('completed', 'failed')

# ── Batching / export defaults ───────────────────────────────────────────────
DEFAULT_BATCH_SIZE = int(os.getenv('RANK_BATCH_SIZE', '5'))
DEFAULT_TOP_N = 3
