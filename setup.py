"""Setup configuration for AWS Contact Queries."""

from setuptools import setup, find_packages

setup(
    name="aws-contact-queries",
    version="0.1.0",
    description="Save and query contacts in a zoned DynamoDB record store",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.11",
    install_requires=[
        "boto3>=1.34.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4.0",
            "hypothesis>=6.88.0",
            "pytest-asyncio>=0.21.0",
        ]
    },
    entry_points={
        "console_scripts": [
            "aws-contact-queries=src.__main__:main",
        ]
    }
)
