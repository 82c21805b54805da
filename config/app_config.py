import os
from dotenv import load_dotenv

load_dotenv()

PLATFORM_NAME = os.getenv("PLATFORM_NAME", "MonHubImmo")

# Apporteur posts: percentage commission must stay strictly below this cap
APPORTEUR_COMMISSION_CAP_PERCENT = float(os.getenv("APPORTEUR_COMMISSION_CAP_PERCENT", 50))

FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Post status reconciliation worker
RECONCILE_INTERVAL_MINUTES = int(os.getenv("RECONCILE_INTERVAL_MINUTES", 30))

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", FRONTEND_URL).split(",") if o.strip()]
