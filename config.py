import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()

# ── хранилище ───────────────────────────────────────────────────────────────
DB_PATH          = os.getenv("DB_PATH", "/data/abattoir.db")
FALLBACK_DB_PATH = os.path.join(os.getcwd(), "data", "abattoir.db")

# ── HTTP ────────────────────────────────────────────────────────────────────
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8081"))

# ── бот ─────────────────────────────────────────────────────────────────────
BOT_TOKEN = os.getenv("API_TOKEN")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


# ── вспомогательное ─────────────────────────────────────────────────────────
def _parse_ids(raw: str) -> list[int]:
    """Строку '1, -2 ,3' → [1,-2,3]  (пустые / неверные отбросит)."""
    out: list[int] = []
    for x in raw.split(","):
        x = x.strip()
        if x.lstrip("-").isdigit():
            out.append(int(x))
    return out


# ── чаты, которым бот отдаёт отчёты (пусто = всем) ──────────────────────────
ALLOWED_CHAT_IDS: list[int] = _parse_ids(os.getenv("ALLOWED_CHAT_IDS", ""))


# ── dataclass Config ────────────────────────────────────────────────────────
@dataclass
class Config:
    db_path: str
    fallback_db_path: str
    host: str
    port: int
    bot_token: str | None
    allowed_chat_ids: list[int]
    log_level: str


def load_config() -> Config:
    return Config(
        db_path          = DB_PATH,
        fallback_db_path = FALLBACK_DB_PATH,
        host             = HOST,
        port             = PORT,
        bot_token        = BOT_TOKEN,
        allowed_chat_ids = ALLOWED_CHAT_IDS,
        log_level        = LOG_LEVEL,
    )
