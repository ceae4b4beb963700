"""
Setup script for bot-gateway: retrieval-augmented chat API for configured bots
"""

from setuptools import setup, find_packages

setup(
    name="bot-gateway",
    version="1.0.0",
    description="Retrieval-augmented chat API for configured bots",
    long_description="Chat gateway that authorizes API callers against a bot registry, retrieves supporting documents, generates answers with the bot's language model and records every exchange, with one-shot JSON and server-sent event delivery",
    long_description_content_type="text/markdown",
    package_dir={"": "src"},
    packages=find_packages(where="src", exclude=["tests*"]),
    python_requires=">=3.9",
    install_requires=[
        # Core dependencies
        "google-generativeai>=0.8.5",
        "sentence-transformers>=3.0.0",
        "openai>=1.30.0",
        "python-dotenv>=1.0.0",

        # API
        "fastapi>=0.110.0",
        "uvicorn>=0.27.0",
        "pydantic>=2.5.0",
        "pydantic-settings>=2.1.0",

        # Storage
        "chromadb>=0.4.0",
        "psycopg2-binary>=2.9.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
            "pytest-mock>=3.10.0",
            "httpx>=0.25.0",
            "black>=22.0.0",
            "isort>=5.10.0",
            "mypy>=1.0.0",
            "flake8>=4.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "bot-gateway=botgateway.__main__:main",
        ],
    },
    author="Bot Gateway Team",
    license="MIT",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Topic :: Scientific/Engineering :: Artificial Intelligence",
        "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    keywords="ai rag chatbot retrieval-augmented-generation server-sent-events",
)
