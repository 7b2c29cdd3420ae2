"""Setup configuration for prvelocity"""

from setuptools import setup, find_packages

setup(
    name="ado-pr-velocity",
    version="0.1.0",
    description=(
        "Azure DevOps pull request velocity and code impact analytics: "
        "paginated ingestion, LOC estimation, and time-series aggregation."
    ),
    author="ADO PR Velocity Contributors",
    author_email="",
    python_requires=">=3.10",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    install_requires=[
        "requests>=2.28.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0",
            "black>=22.0",
            "flake8>=4.0",
            "mypy>=0.950",
        ],
    },
    entry_points={
        "console_scripts": [
            "ado-pr-velocity=prvelocity.main:main",
        ],
    },
)
