from pathlib import Path
from dotenv import load_dotenv

SERVICE_ROOT = Path(__file__).resolve().parents[2]  # cpap_tracker_service/

def load_env() -> None:
    env_path = SERVICE_ROOT / "config.env"
    load_dotenv(dotenv_path=env_path, override=False)
