#!/usr/bin/env python

from setuptools import setup

setup(
    name="mongofs",
    version="0.1.0",
    description="Filesystem interface for MongoDB GridFS",
    packages=["mongofs", "mongofs.filesystem", "mongofs.storage"],
    include_package_data=True,
    zip_safe=False,
    python_requires=">=3.11",
    keywords=["GridFS", "MongoDB", "filesystem"],
    classifiers=[
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Topic :: System :: Filesystems",
    ],
    install_requires=[
        "pymongo>=4.0",
        "python-dotenv",
        "pydantic>=2",
        "pydantic-settings",
        "typing_extensions",
    ],
    extras_require={
        "dev": [
            "pytest",
            "mypy",
            "flake8",
        ]
    },
    entry_points={
        "console_scripts": [
            "mongofs = mongofs.__main__:main"
        ]
    },
)
