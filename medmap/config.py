import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./medmap.db")

# Hosted auth provider (Supabase) - JWTs are HS256 signed with the project JWT secret
SUPABASE_JWT_SECRET = os.getenv("SUPABASE_JWT_SECRET")
SUPABASE_JWT_AUDIENCE = os.getenv("SUPABASE_JWT_AUDIENCE", "authenticated")

# Frontend base URL for gateway return/cancel redirects
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5173")
# Public URL of this API, used to build the gateway notify (webhook) URL
API_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:8000")

# PayFast Configuration
PAYFAST_MERCHANT_ID = os.getenv("PAYFAST_MERCHANT_ID")
PAYFAST_MERCHANT_KEY = os.getenv("PAYFAST_MERCHANT_KEY")
PAYFAST_PASSPHRASE = os.getenv("PAYFAST_PASSPHRASE")
# Sandbox by default - switch to https://www.payfast.co.za/eng/process for live
PAYFAST_PROCESS_URL = os.getenv("PAYFAST_PROCESS_URL", "https://sandbox.payfast.co.za/eng/process")
PAYFAST_VALIDATE_URL = os.getenv(
    "PAYFAST_VALIDATE_URL", "https://sandbox.payfast.co.za/eng/query/validate"
)
PAYFAST_VERIFY_SIGNATURE = os.getenv("PAYFAST_VERIFY_SIGNATURE", "true").lower() == "true"
PAYFAST_VALIDATE_WITH_SERVER = (
    os.getenv("PAYFAST_VALIDATE_WITH_SERVER", "false").lower() == "true"
)
PAYFAST_CURRENCY = "ZAR"

# Booking fees (integer cents)
BOOKING_FEE_CENTS = int(os.getenv("BOOKING_FEE_CENTS", "1000"))

# Premium membership
MEMBERSHIP_PRICE_CENTS = int(os.getenv("MEMBERSHIP_PRICE_CENTS", "29900"))
MEMBERSHIP_FREE_BOOKINGS = int(os.getenv("MEMBERSHIP_FREE_BOOKINGS", "3"))
MEMBERSHIP_PERIOD_MONTHS = int(os.getenv("MEMBERSHIP_PERIOD_MONTHS", "3"))

# Resend Email Configuration
RESEND_API_KEY = os.getenv("RESEND_API_KEY")
EMAIL_FROM_ADDRESS = os.getenv("EMAIL_FROM_ADDRESS", "MedMap <noreply@medmap.co.za>")

# Rate limiting (Redis backed). Disable for local development and tests.
RATE_LIMIT_ENABLED = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"

# HTTP surface
ENVIRONMENT = os.getenv("ENVIRONMENT", "development").lower()
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", f"{FRONTEND_URL},http://localhost:3000").split(",")
SECURITY_HEADERS_ENABLED = os.getenv("SECURITY_HEADERS_ENABLED", "true").lower() == "true"
