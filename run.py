# === Imports ===
import logging

from dotenv import load_dotenv

# === Load environment variables ===
load_dotenv()

from sn_admin.main import app  # noqa: E402

logger = logging.getLogger("sn_admin")

# === Run ===
if __name__ == "__main__":
    import uvicorn

    logger.info("🚀 Starting SN Admin backend")
    uvicorn.run(
        "run:app",
        host="0.0.0.0",
        port=10000,
        reload=True,
        access_log=True,
        log_level="debug"
    )
