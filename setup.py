from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

with open("requirements.txt", "r", encoding="utf-8") as fh:
    requirements = [line.strip() for line in fh if line.strip() and not line.startswith("#")]

setup(
    name="tournament-registration",
    version="1.0.0",
    author="Panamerican Gymnastics Team",
    description="Registration backend for Pan-American aerobic gymnastics tournaments",
    long_description=long_description,
    long_description_content_type="text/markdown",
    classifiers=[
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Development Status :: 4 - Beta",
        "Framework :: FastAPI",
        "Intended Audience :: Developers",
    ],
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    python_requires=">=3.9",
    install_requires=requirements,
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.24",
            "httpx>=0.27",
            "aiosqlite>=0.19",
        ],
    },
    entry_points={
        "console_scripts": [
            "tournament-registration=tournament_registration.api.main:main",
        ],
    },
    include_package_data=True,
    package_data={
        "tournament_registration": [
            "migrations/script.py.mako",
            "migrations/*.py",
            "migrations/versions/*.py",
        ],
    },
)
