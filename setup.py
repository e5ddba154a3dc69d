"""Setup script for the Core AI Gateway and its client SDK."""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="core-ai-gateway",
    version="1.0.0",
    description="Scoped retirement assistant gateway with PII-safe voice proxy",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["core_ai_gateway", "core_ai_gateway.*", "core_ai_client", "core_ai_client.*"]),
    package_data={"core_ai_gateway": ["policies/*.yaml"]},
    include_package_data=True,
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Topic :: Office/Business :: Financial",
        "Framework :: FastAPI",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.9",
    install_requires=[
        "fastapi>=0.100.0",
        "uvicorn>=0.23.0",
        "pydantic>=2.0",
        "python-dotenv>=1.0.0",
        "python-multipart>=0.0.6",
        "httpx>=0.24.0",
        "regex>=2023.0.0",
        "pyyaml>=6.0",
        "google-auth>=2.20.0",
        "requests>=2.28.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "core-ai-gateway=core_ai_gateway.__main__:main",
        ],
    },
)
