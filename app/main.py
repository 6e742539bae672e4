# app/main.py  (통합 엔트리포인트: uvicorn app.main:app)
from dotenv import load_dotenv

# 루트 .env 로딩 (pydantic-settings 외에 os.getenv를 쓰는 모듈도 있어서 여기서 한 번에)
load_dotenv()

from app.backend.main import app as app  # noqa: E402
