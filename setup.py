"""Package setup for meterdesk-sdk."""

from setuptools import setup

setup(
    name="meterdesk-sdk",
    version="1.0.0",
    description="Async client for a usage-metering gateway's admin API",
    package_dir={"": "meterdesk_sdk"},
    packages=["meterdesk_sdk"],
    python_requires=">=3.9",
    install_requires=[
        "httpx>=0.24.0",
        "pydantic>=2.0.0",
    ],
    extras_require={
        "test": ["pytest>=7.0.0"],
    },
)
