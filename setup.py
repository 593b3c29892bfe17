"""
Setup script for the PDF gateway.

Allows development installation with `pip install -e .[test]`
"""

from setuptools import setup, find_packages

setup(
    name="pdf-gateway",
    version="0.1.0",
    packages=find_packages(include=["pdf_gateway", "pdf_gateway.*"]),
    python_requires=">=3.11",
    install_requires=[
        "fastapi>=0.110",
        "pydantic>=2.5",
        "pydantic-settings>=2.1",
        "playwright>=1.40",
        "uvicorn>=0.27",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
            "httpx>=0.26",
        ],
    },
    entry_points={
        "console_scripts": [
            "pdf-gateway=pdf_gateway.__main__:main",
        ],
    },
)
