from setuptools import setup, find_packages

setup(
    name="smart_patch",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "pyyaml",
        "textual",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        "console_scripts": [
            "smart-patch=smart_patch.cli:main",
        ],
    },
    python_requires=">=3.10",
    author="Uday Kanth",
    description="Unified-diff validation/application and marker-based "
                "merging of partial code edits.",
)
