from setuptools import setup, find_packages

setup(
    name="rememberme-notifications",
    version="0.1.0",
    packages=find_packages(include=["rememberme", "rememberme.*"]),
    python_requires=">=3.10",
    install_requires=[
        "fastapi",
        "uvicorn",
        "sqlalchemy>=2.0",
        "psycopg2-binary",
        "python-jose[cryptography]",
        "pydantic>=2",
        "pydantic-settings",
        "python-dotenv",
        "apscheduler>=3.10,<4",
        "celery",
        "kombu",
        "prometheus-client",
        "prometheus-fastapi-instrumentator",
        "requests",
        "tzdata",
    ],
    extras_require={
        "test": [
            "pytest",
            "httpx",
        ],
    },
    entry_points={
        "console_scripts": [
            "rememberme-api=rememberme.notifications.service:serve",
            "rememberme-scheduler=rememberme.notifications.worker:main",
        ],
    },
)
