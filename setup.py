from setuptools import find_packages, setup

setup(
    name="sirkulo-media-backend",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*", "alembic", "alembic.*"]),
    python_requires=">=3.11",
    install_requires=[
        "fastapi>=0.104.1",
        "uvicorn>=0.24.0",
        "sqlalchemy>=2.0,<2.1",
        "alembic>=1.13.1",
        "pydantic-settings>=2.1.0",
        "python-dotenv>=1.0.0",
        "python-multipart>=0.0.6",
        "Pillow>=10.1.0",
        "minio>=7.2.0",
        "APScheduler>=3.10,<4",
        "PyJWT>=2.8.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "httpx>=0.25",
        ],
    },
)
