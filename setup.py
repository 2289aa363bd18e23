from setuptools import setup, find_packages

setup(
    name="mbta-board",
    version="0.1.0",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.9",
    install_requires=[
        "aiohttp",
        "fastapi",
        "pydantic>=2",
        "python-dotenv",
        "rich",
        "slowapi",
        "tzdata",
        "uvicorn",
    ],
    extras_require={
        "test": [
            "httpx",
            "pytest",
            "pytest-asyncio",
        ],
    },
)
