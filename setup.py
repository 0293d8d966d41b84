"""
mappergen - scalikejdbc Mapper Generator
Install: pip install -e .
"""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as f:
    long_description = f.read()

setup(
    name="mappergen",
    version="1.0.0",
    author="mappergen contributors",
    author_email="",
    description="Generate scalikejdbc models, specs and ScalaCheck arbitraries from table metadata",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["mappergen", "mappergen.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Code Generators",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.10",
    install_requires=[
        "pydantic>=2.0.0",
        "pyyaml>=6.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "mappergen=mappergen.cli:cli_main",
        ],
    },
    keywords="scala, scalikejdbc, scalacheck, generator, code-generator, crud",
)
