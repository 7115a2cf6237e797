import os

import httpx
from dotenv import load_dotenv

load_dotenv(".env.local")
load_dotenv()

BEARER_TOKEN = os.getenv("OPENSEA_ARTTO_SERVER_BEARER_TOKEN")
if not BEARER_TOKEN:
    raise SystemExit("OPENSEA_ARTTO_SERVER_BEARER_TOKEN env var is required")

API_URL = os.getenv("API_URL", "http://localhost:3001")
AMOUNT_USD = float(os.getenv("AMOUNT_USD", "5"))

response = httpx.post(
    f"{API_URL}/fund-openrouter",
    headers={"Authorization": f"Bearer {BEARER_TOKEN}"},
    json={"amount_usd": AMOUNT_USD},
    timeout=300,
)
print("Status:", response.status_code)
print("Body:", response.text)
