from setuptools import setup, find_packages

setup(
    name="cityfix",
    version="1.0.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.9",
    install_requires=[
        "fastapi",
        "uvicorn",
        "sqlalchemy>=2.0",
        "psycopg2-binary",
        "python-jose[cryptography]",
        "passlib[bcrypt]",
        "bcrypt<4.1",  # passlib's backend probe breaks on newer bcrypt
        "python-multipart",
        "pydantic[email]>=2",
        "pydantic-settings",
        "python-dotenv",
    ],
    extras_require={
        "test": [
            "pytest",
            "httpx",
        ],
    },
)
