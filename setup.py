from setuptools import setup, find_packages

setup(
    name="gdiff",
    version="0.1.0",
    packages=find_packages(include=["gdiff", "gdiff.*"]),
    python_requires=">=3.10",
    install_requires=[
        "Levenshtein>=0.21",
        "pydantic>=2.0",
        "rich>=13.0",
        "prompt_toolkit>=3.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "gdiff=gdiff.cli:main",
        ],
    },
)
