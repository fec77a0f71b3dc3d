import os

# Настройки читаются при импорте resume_ats.core.config, поэтому env задаём здесь.
# Лимиты подняты, чтобы весь прогон тестов не упирался в 429.
os.environ.setdefault("RATE_LIMIT", "100000/minute")
os.environ.setdefault("AI_RATE_LIMIT", "100000/minute")
os.environ.setdefault("JWT_SECRET", "test-access-secret")
os.environ.setdefault("JWT_REFRESH_SECRET", "test-refresh-secret")
os.environ.setdefault("AI_API_KEY", "test-ai-key")
os.environ.setdefault("CREDIT_CHARGE_MODE", "post")
os.environ.setdefault("SIGNUP_CREDITS", "5")
os.environ.setdefault("PUBLIC_ORIGIN", "https://resume.example.com")
os.environ.setdefault("STRIPE_SECRET_KEY", "")
os.environ.setdefault("STRIPE_WEBHOOK_SECRET", "whsec_test")
os.environ.setdefault("S3_ACCESS_KEY", "")
