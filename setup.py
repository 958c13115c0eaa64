from setuptools import setup, find_packages

setup(
    name="autofolio",
    version="1.0.0",
    author="AutoFolio Team",
    description="Portfolio drift detection, rebalancing backtests and live drift monitoring",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    package_data={
        "autofolio_config": ["py.typed"],
        "autofolio_core": ["py.typed"],
        "drift_calculator": ["py.typed"],
    },
    install_requires=[
        "pydantic==2.11.7",
        "PyYAML==6.0.2",
        "aiohttp==3.12.15",
        "APScheduler==3.11.0",
    ],
    extras_require={
        "test": [
            "pytest==8.4.1",
        ],
    },
    entry_points={
        "console_scripts": [
            "autofolio-monitor=portfolio_monitor.main:main",
            "autofolio-backtest=portfolio_monitor.backtest:main",
        ],
    },
    python_requires=">=3.11",
)
