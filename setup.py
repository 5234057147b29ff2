from setuptools import setup, find_packages

setup(
    name="unified-replication-operator",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "kubernetes>=28.1.0",
        "aiohttp>=3.8.0",
        "prometheus-client>=0.17.0",
        "python-dotenv>=1.0.0",
        "PyYAML>=6.0",
        "tabulate>=0.9.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.18.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "unified-replication=unified_replication.cli:main",
        ],
    },
    python_requires=">=3.10",
)
