from setuptools import find_packages, setup

setup(
    name="rental-pricing",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_dir={"": "."},
    python_requires=">=3.11",
    install_requires=[
        "pydantic>=2.5.0",
        "pydantic-settings>=2.1.0",
        "python-dotenv>=1.0.0",
        "loguru>=0.7.0",
        "prometheus-client>=0.19.0",
        "cachetools>=5.3.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4.0",
        ],
    },
)
