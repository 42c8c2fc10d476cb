# api_server.py
import os

import uvicorn
from dotenv import load_dotenv

# Load .env (DATABASE_URL, STORE_NAME, TAX_RATE, ...) before the application is built
load_dotenv()


def main() -> None:
    uvicorn.run(
        "pos_api.main:create_app",
        factory=True,
        host=os.getenv("API_HOST", "127.0.0.1"),
        port=int(os.getenv("API_PORT", "8000")),
    )


if __name__ == "__main__":
    main()

# To run the API: python api_server.py  (or uvicorn pos_api.main:create_app --factory --port 8000)
