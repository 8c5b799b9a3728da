"""Setup configuration for sandbox-manager."""

from setuptools import find_packages, setup

with open("README.md", "r", encoding="utf-8") as f:
    long_description = f.read()

setup(
    name="sandbox-manager",
    version="1.0.0",
    description="Registry, reconciliation and lifecycle management for agent sandbox containers",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="WeCode-AI Team",
    author_email="team@wecode.ai",
    packages=find_packages(include=["sandbox_manager", "sandbox_manager.*"]),
    python_requires=">=3.10",
    install_requires=[
        "click>=8.0.0",
        "PyYAML>=5.4.0",
        "redis>=4.5.0",
        "APScheduler>=3.10,<4",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "pytest-mock>=3.10",
            "pytest-asyncio>=0.21",
        ],
    },
    entry_points={
        "console_scripts": [
            "sandbox-manager=sandbox_manager.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: Apache Software License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: System :: Systems Administration",
    ],
    keywords="sandbox docker containers agent registry",
)
