import os
import sys
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT_DIR))

os.environ.setdefault("GOOGLE_API_KEY", "test_key")
os.environ.setdefault("APP_ENV", "testing")
