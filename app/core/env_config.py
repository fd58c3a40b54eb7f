"""
환경 변수 설정 헬퍼
"""

from pathlib import Path

from dotenv import load_dotenv


def load_env_file(env_path: str | Path = ".env") -> bool:
    """
    .env 파일을 UTF-8로 읽어서 환경 변수로 설정

    이미 설정된 환경 변수는 덮어쓰지 않는다.

    Returns:
        bool: .env 파일을 읽었는지 여부
    """
    return load_dotenv(Path(env_path), encoding="utf-8", override=False)
