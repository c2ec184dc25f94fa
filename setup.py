"""Setup configuration for platformq-fhe-vote library."""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="platformq-fhe-vote",
    version="1.0.0",
    author="PlatformQ Team",
    author_email="team@platformq.io",
    description="Confidential weighted proposals on EVM ledgers with FHE-encrypted weights",
    long_description=long_description,
    long_description_content_type="text/markdown",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Libraries",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.9",
    install_requires=[
        "web3>=7.0.0",
        "eth-account>=0.13.0",
        "eth-utils>=4.0.0",
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        "python-json-logger>=2.0.0",
        "click>=8.0.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
            "pytest-cov>=4.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "fhevotectl = platformq_fhe_vote.cli:cli",
        ],
    },
)
