from pathlib import Path
from setuptools import find_packages, setup

README = Path(__file__).parent / "README.md"

setup(
    name="amdbridge",
    version="0.3.0",
    description="Make a bundler's output coexist with an AMD loader (require/define renaming, AMD bootstrap)",
    long_description=README.read_text(encoding="utf-8") if README.exists() else "",
    long_description_content_type="text/markdown",
    author="GAHEOS",
    python_requires=">=3.9",
    package_dir={"": "src"},
    packages=find_packages("src"),
    install_requires=[
        "tree-sitter>=0.23",
        "tree-sitter-language-pack>=0.7,<0.14",
        "lxml>=4.9",
    ],
    extras_require={
        "test": ["pytest>=7"],
    },
    entry_points={
        "console_scripts": [
            "amdbridge=amdbridge.cli:main",
        ],
    },
)
