"""Setup configuration for the modrelay Discord bot."""

from setuptools import setup, find_packages

setup(
    name="modrelay",
    version="0.1.0",
    description="Thread relay and user blocks for a Discord support bot",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    package_data={"modrelay.localization": ["locales/*.yml"]},
    include_package_data=True,
    python_requires=">=3.11",
    install_requires=[
        "py-cord>=2.6",
        "aiosqlite>=0.20",
        "PyYAML>=6.0",
        "python-dotenv>=1.0",
        "prompt_toolkit>=3.0",
        "pytimeparse>=1.1.8",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "modrelay=modrelay.main:main",
        ],
    },
)
