from setuptools import setup, find_packages

setup(
    name="jumpdb",
    version="0.3.0",
    description="Frecency-ranked directory store for jump-to-directory tools",
    author="Dariusz Duszyński",
    author_email="dariusz@datavision.pl",

    package_dir={"": "src"},
    packages=find_packages(where="src"),

    install_requires=[
        "pydantic>=2.0.0",
        "click>=8.2.0",
        "prometheus-client>=0.16.0",
        "structlog>=23.1.0",
    ],

    extras_require={
        "test": [
            "pytest>=7.3.0",
            "pytest-cov>=4.0.0",
        ],
        "dev": [
            "pytest>=7.3.0",
            "pytest-cov>=4.0.0",
            "black>=23.3.0",
            "mypy>=1.3.0",
            "ruff>=0.0.270",
        ],
    },

    entry_points={
        "console_scripts": [
            "jumpdb=jumpdb.cli.main:cli",
        ],
    },

    python_requires=">=3.11",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3.11",
    ],
)
