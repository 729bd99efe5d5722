import os


def _as_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


# ✅ Database
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./prepwise.db")
RUN_MIGRATIONS = _as_bool(os.getenv("RUN_MIGRATIONS", "0"))

# ✅ Security
SECRET_KEY = os.getenv("SECRET_KEY", "change-me-in-production")
ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_HOURS = int(os.getenv("ACCESS_TOKEN_EXPIRE_HOURS", "19"))

# ✅ Google sign-in
GOOGLE_CLIENT_ID = os.getenv("GOOGLE_CLIENT_ID")
GOOGLE_CERTS_URL = os.getenv("GOOGLE_CERTS_URL", "https://www.googleapis.com/oauth2/v3/certs")
GOOGLE_ISSUERS = ("accounts.google.com", "https://accounts.google.com")

# ✅ Local development auth bypass
BYPASS_AUTH = _as_bool(os.getenv("BYPASS_AUTH", "0"))
MOCK_USER_EMAIL = os.getenv("MOCK_USER_EMAIL", "dev@prepwise.local")
MOCK_USER_NAME = os.getenv("MOCK_USER_NAME", "Dev User")
MOCK_USER_GOOGLE_ID = os.getenv("MOCK_USER_GOOGLE_ID", "mock-google-id")

# ✅ OpenAI
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")

# ✅ LeetCode search
LEETCODE_API_URL = os.getenv("LEETCODE_API_URL", "https://leetcode-api-pied.vercel.app")
LEETCODE_TIMEOUT_SECONDS = float(os.getenv("LEETCODE_TIMEOUT_SECONDS", "10"))
QUESTIONS_PER_TOPIC = int(os.getenv("QUESTIONS_PER_TOPIC", "6"))

# ✅ HTTP
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000").split(",")
    if origin.strip()
]

# ✅ Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
